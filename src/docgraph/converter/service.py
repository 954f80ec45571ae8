from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import List, Optional, Sequence

import structlog

from ..config import Settings
from ..core.errors import Diagnostic, FrontEndError
from ..frontend.base import FrontEndRegistry
from ..frontend.nodes import NodeKind, SourceFile, SourceNode
from ..frontend.typescript import TypeScriptFrontEnd
from ..models.reflections import ProjectReflection, Reflection
from ..resolver.links import ResolvedProject
from ..resolver.resolver import resolve_project
from .context import Context
from .nodes import convert_node, convert_nodes

log = structlog.get_logger()


@dataclass(slots=True)
class ConversionResult:
    project: ResolvedProject
    diagnostics: List[Diagnostic] = field(default_factory=list)


class ConverterService:
    def __init__(self, settings: Optional[Settings] = None, registry: FrontEndRegistry | None = None) -> None:
        self.settings = settings or Settings()
        self.registry = registry or build_registry(self.settings)

    # --- public API ---
    def convert_paths(self, paths: Optional[Sequence[Path]] = None) -> ConversionResult:
        entry_points = list(paths) if paths else list(self.settings.entry_points)
        if not entry_points:
            raise FrontEndError.no_input()
        files = self.registry.get("typescript").read(entry_points)
        return self.convert(files)

    def convert(self, files: Sequence[SourceFile]) -> ConversionResult:
        """Convert every file in order into one project, then resolve it."""
        if not files:
            raise FrontEndError.no_input()
        project = ProjectReflection.create(self.settings.name)
        context = Context(project, self.settings)
        log.info("converter.start", files=len(files), mode=self.settings.mode)
        for source in files:
            self._convert_file(context, source)
        resolved = resolve_project(project)
        diagnostics = [*context.diagnostics, *resolved.diagnostics]
        log.info(
            "converter.done",
            reflections=len(project.registry),
            diagnostics=len(diagnostics),
        )
        return ConversionResult(project=resolved, diagnostics=diagnostics)

    # --- helpers ---
    def _convert_file(self, context: Context, source: SourceFile) -> None:
        external = source.is_external or self._is_external(source.file_name)
        if external and self.settings.exclude_externals:
            log.debug("converter.skip_external", file=source.file_name)
            return
        context.current_file = source.file_name
        context.current_file_external = external
        try:
            if self.settings.mode == "modules":
                converted = self._convert_module(context, source)
            else:
                converted = convert_nodes(context, source.nodes)
            for reflection in converted:
                context.project.note_file(source.file_name, reflection)
        finally:
            context.current_file = None
            context.current_file_external = False

    def _convert_module(self, context: Context, source: SourceFile) -> List[Reflection]:
        name = source.module_name or f'"{source.file_name}"'
        module = SourceNode(
            kind=NodeKind.MODULE,
            name=name,
            symbol_id=source.module_symbol or name,
            children=source.nodes,
            modifiers={"export"},
            comment=source.comment,
            file=source.file_name,
            line=1,
        )
        reflection = convert_node(context, module)
        return [reflection] if reflection is not None else []

    def _is_external(self, file_name: str) -> bool:
        return any(fnmatch(file_name, pattern) for pattern in self.settings.external_patterns)


def build_registry(settings: Settings) -> FrontEndRegistry:
    registry = FrontEndRegistry()
    registry.register(TypeScriptFrontEnd(mode=settings.mode))
    return registry
