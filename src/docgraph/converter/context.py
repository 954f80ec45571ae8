from __future__ import annotations

from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, TypeVar

import structlog

from ..config import Settings
from ..core.errors import Diagnostic, ErrorCode
from ..models.reflections import ProjectReflection, Reflection
from ..models.types import TypeParameterType

log = structlog.get_logger()

T = TypeVar("T")


class Context:
    """Conversion state shared by every node converter.

    The context tracks the reflection new declarations attach to (the
    scope) and the type parameters visible from it. ``scope_of`` swaps
    both for the duration of a block and always puts the previous ones
    back, so converters never pass parent pointers around.
    """

    def __init__(self, project: ProjectReflection, settings: Optional[Settings] = None) -> None:
        self.project = project
        self.settings = settings or Settings()
        self.diagnostics: List[Diagnostic] = []
        self.current_file: Optional[str] = None
        self.current_file_external = False
        self._scope: Reflection = project
        self._type_parameters: Dict[str, TypeParameterType] = {}

    @property
    def scope(self) -> Reflection:
        return self._scope

    @property
    def type_parameters(self) -> Mapping[str, TypeParameterType]:
        return MappingProxyType(self._type_parameters)

    @contextmanager
    def scope_of(
        self,
        reflection: Reflection,
        type_parameters: Optional[Mapping[str, TypeParameterType]] = None,
    ) -> Iterator[Reflection]:
        previous_scope = self._scope
        previous_bindings = self._type_parameters
        self._scope = reflection
        if type_parameters:
            self._type_parameters = {**previous_bindings, **type_parameters}
        try:
            yield reflection
        finally:
            self._scope = previous_scope
            self._type_parameters = previous_bindings

    def with_scope(
        self,
        reflection: Reflection,
        body: Callable[[], T],
        type_parameters: Optional[Mapping[str, TypeParameterType]] = None,
    ) -> T:
        with self.scope_of(reflection, type_parameters):
            return body()

    # --- symbols ---
    def register(self, reflection: Reflection, symbol_id: Optional[str]) -> None:
        if symbol_id is None:
            return
        self.project.registry.register_symbol(symbol_id, reflection)

    def lookup(self, symbol_id: Optional[str]) -> Optional[Reflection]:
        return self.project.registry.lookup_symbol(symbol_id)

    # --- diagnostics ---
    def report(self, code: ErrorCode, message: str, **details: Any) -> Diagnostic:
        if self.current_file and "file" not in details:
            details["file"] = self.current_file
        diagnostic = Diagnostic(code=code, message=message, details=details)
        self.diagnostics.append(diagnostic)
        log.warning(
            f"converter.{code.name.lower()}",
            message=message,
            **details,
        )
        return diagnostic
