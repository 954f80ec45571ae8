"""Resolved-graph types.

Conversion produces a bare ``ProjectReflection``. The slots only the
resolver may fill (reverse edges, member links, type hierarchy) live here,
in ``DeclarationLinks`` keyed by declaration id, so nothing can read them
before resolution has run.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from ..core.errors import Diagnostic
from ..models.reflections import DeclarationReflection, ProjectReflection, Reflection
from ..models.types import DeclarationExpander, ReferenceType, Type


@dataclass(slots=True)
class DeclarationHierarchy:
    """One level of a linearized type hierarchy."""

    types: List[Type]
    next: Optional[DeclarationHierarchy] = None
    is_target: bool = False

    def __iter__(self) -> Iterator[DeclarationHierarchy]:
        level: Optional[DeclarationHierarchy] = self
        while level is not None:
            yield level
            level = level.next

    def to_dict(self, expand: Optional[DeclarationExpander] = None) -> Dict[str, Any]:
        data: Dict[str, Any] = {"types": [t.to_dict(expand) for t in self.types]}
        if self.is_target:
            data["isTarget"] = True
        if self.next is not None:
            data["next"] = self.next.to_dict(expand)
        return data


@dataclass(slots=True)
class DeclarationLinks:
    extended_by: List[ReferenceType] = field(default_factory=list)
    implemented_by: List[ReferenceType] = field(default_factory=list)
    inherited_from: Optional[ReferenceType] = None
    overwrites: Optional[ReferenceType] = None
    implementation_of: Optional[ReferenceType] = None
    type_hierarchy: Optional[DeclarationHierarchy] = None

    def is_empty(self) -> bool:
        return not (
            self.extended_by
            or self.implemented_by
            or self.inherited_from
            or self.overwrites
            or self.implementation_of
            or self.type_hierarchy
        )


@dataclass(slots=True)
class ResolvedProject:
    """A project after the resolver pass, ready for rendering."""

    project: ProjectReflection
    links: Dict[int, DeclarationLinks] = field(default_factory=dict)
    unresolved: List[ReferenceType] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def links_for(self, declaration: DeclarationReflection | int) -> DeclarationLinks:
        rid = declaration if isinstance(declaration, int) else declaration.id
        links = self.links.get(rid)
        return links if links is not None else DeclarationLinks()

    def get(self, rid: Optional[int]) -> Optional[Reflection]:
        return self.project.get(rid)

    def declarations(self) -> Iterator[DeclarationReflection]:
        return self.project.declarations()

    def find(self, predicate: Callable[[Reflection], bool]) -> List[Reflection]:
        return [r for r in self.project.registry if predicate(r)]

    def find_by_name(self, name: str) -> Optional[Reflection]:
        return self.project.find_by_name(name)
