"""Shared builders for docgraph tests.

Most tests hand-build front-end nodes so the converter and resolver can be
exercised without a parser. The TypeScript tests read sources from
``fixtures/typescript``.
"""
import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import pytest
import structlog

from docgraph.config import Settings
from docgraph.converter.context import Context
from docgraph.converter.service import ConversionResult, ConverterService
from docgraph.frontend.base import FrontEndRegistry
from docgraph.frontend.nodes import (
    NodeKind,
    ParameterDescriptor,
    SignatureDescriptor,
    SourceFile,
    SourceNode,
    TypeDescriptor,
    TypeParameterDescriptor,
)
from docgraph.frontend.typescript import TypeScriptFrontEnd
from docgraph.models.comments import parse_comment
from docgraph.models.reflections import ProjectReflection, Reflection

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "typescript"


def decl(
    kind: NodeKind,
    name: Optional[str],
    symbol: Optional[str] = None,
    children: Iterable[SourceNode] = (),
    doc: Optional[str] = None,
    modifiers: Iterable[str] = (),
    **values,
) -> SourceNode:
    """A declaration node; the symbol defaults to the name."""
    return SourceNode(
        kind=kind,
        name=name,
        symbol_id=symbol if symbol is not None else name,
        children=list(children),
        comment=parse_comment(doc) if doc else None,
        modifiers=set(modifiers),
        **values,
    )


def sig(
    *parameters: ParameterDescriptor,
    returns: Optional[TypeDescriptor] = None,
    type_parameters: Iterable[TypeParameterDescriptor] = (),
) -> SignatureDescriptor:
    return SignatureDescriptor(
        parameters=list(parameters),
        return_type=returns,
        type_parameters=list(type_parameters),
    )


def param(name: str, type: Optional[TypeDescriptor] = None, **values) -> ParameterDescriptor:
    return ParameterDescriptor(name=name, type=type, **values)


def ref(name: str, symbol: Optional[str] = None, *arguments: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor.reference(name, symbol if symbol is not None else name, list(arguments))


def intrinsic(name: str) -> TypeDescriptor:
    return TypeDescriptor.intrinsic(name)


def source_file(file_name: str, *nodes: SourceNode, **values) -> SourceFile:
    return SourceFile(file_name=file_name, nodes=list(nodes), **values)


def convert(*files: SourceFile, settings: Optional[Settings] = None) -> ConversionResult:
    """Convert and resolve hand-built files without a parser."""
    service = ConverterService(settings or Settings(), registry=FrontEndRegistry())
    return service.convert(list(files))


def walk_owned(project: ProjectReflection) -> List[Reflection]:
    """Every reflection reachable through ``traverse``, checking parent links on the way."""
    found: List[Reflection] = []
    stack: List[Reflection] = [project]
    while stack:
        current = stack.pop()
        for child, _slot in current.traverse(project):
            assert child.parent_id == current.id, f"{child} is owned by {current} but points at {child.parent_id}"
            found.append(child)
            stack.append(child)
    return found


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text()


@pytest.fixture
def context() -> Context:
    return Context(ProjectReflection.create("Test"), Settings())


@pytest.fixture
def context_factory() -> Callable[..., Context]:
    def _create(**settings) -> Context:
        return Context(ProjectReflection.create("Test"), Settings(**settings))

    return _create


@pytest.fixture
def ts_frontend() -> TypeScriptFrontEnd:
    return TypeScriptFrontEnd()


@pytest.fixture
def restore_logging():
    """Undo ``configure_logging`` so later tests do not write to a closed stream."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
