"""Reflection entities of the documentation graph.

Every reflection lives in the project's ``IdentityRegistry``. Relations
between reflections (parent, children, signatures, parameters, type
parameters) are plain integer ids into that registry, so the graph never
holds an ownership cycle. Navigation helpers therefore take the project as
their first argument.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .comments import Comment
from .kinds import NO_FLAGS, ReflectionFlag, ReflectionKind, kind_string
from .registry import IdentityRegistry
from .types import ReferenceType, Type, iter_reflection_types


class TraverseProperty(Enum):
    CHILDREN = "children"
    TYPE_PARAMETER = "typeParameters"
    TYPE_LITERAL = "typeLiteral"
    SIGNATURES = "signatures"
    INDEX_SIGNATURE = "indexSignature"
    GET_SIGNATURE = "getSignature"
    SET_SIGNATURE = "setSignature"
    PARAMETERS = "parameters"


@dataclass(slots=True)
class SourceReference:
    file_name: str
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {"fileName": self.file_name}
        if self.line is not None:
            data["line"] = self.line
        return data


@dataclass(slots=True, eq=False)
class Reflection:
    name: str
    kind: ReflectionKind
    id: int = -1
    flags: ReflectionFlag = NO_FLAGS
    comment: Optional[Comment] = None
    parent_id: Optional[int] = None

    def has_flag(self, flag: ReflectionFlag) -> bool:
        return bool(self.flags & flag)

    def own_types(self) -> List[Optional[Type]]:
        """Types held directly by this reflection."""
        return []

    def traverse(self, project: ProjectReflection) -> Iterator[Tuple[Reflection, TraverseProperty]]:
        """Yield every reflection owned by this one, with the slot holding it."""
        for literal in iter_reflection_types(self.own_types()):
            declaration = project.get(literal.declaration_id)
            if declaration is not None:
                yield declaration, TraverseProperty.TYPE_LITERAL

    def get_full_name(self, project: ProjectReflection, separator: str = ".") -> str:
        parent = project.get(self.parent_id)
        if parent is None or parent.kind == ReflectionKind.Project:
            return self.name
        return parent.get_full_name(project, separator) + separator + self.name

    def __str__(self) -> str:
        return f"{kind_string(self.kind)} {self.name}"


@dataclass(slots=True, eq=False)
class ContainerReflection(Reflection):
    children: List[int] = field(default_factory=list)
    _children_by_name: Dict[str, List[int]] = field(default_factory=dict, repr=False)

    def add_child(self, child: Reflection) -> None:
        if child.parent_id is not None and child.parent_id != self.id:
            raise ValueError(f"{child} already belongs to reflection {child.parent_id}")
        if child.id in self.children:
            return
        child.parent_id = self.id
        self.children.append(child.id)
        self._children_by_name.setdefault(child.name, []).append(child.id)

    def remove_child(self, child: Reflection) -> None:
        if child.id not in self.children:
            return
        self.children.remove(child.id)
        bucket = self._children_by_name.get(child.name, [])
        if child.id in bucket:
            bucket.remove(child.id)
        child.parent_id = None

    def get_children(self, project: ProjectReflection) -> List[Reflection]:
        return [project.registry[cid] for cid in self.children]

    def get_child_by_name(
        self, project: ProjectReflection, names: Union[str, Sequence[str]]
    ) -> Optional[Reflection]:
        parts = names.split(".") if isinstance(names, str) else list(names)
        if not parts:
            return None
        bucket = self._children_by_name.get(parts[0])
        if not bucket:
            return None
        child = project.registry[bucket[0]]
        if len(parts) == 1:
            return child
        if isinstance(child, ContainerReflection):
            return child.get_child_by_name(project, parts[1:])
        return None

    def find_reflection_by_name(
        self,
        project: ProjectReflection,
        names: Union[str, Sequence[str]],
        search_up: bool = False,
    ) -> Optional[Reflection]:
        """Look the name up here, then in each enclosing container."""
        reflection = self.get_child_by_name(project, names)
        if reflection is not None:
            return reflection
        parent = project.get(self.parent_id)
        if isinstance(parent, ContainerReflection):
            return parent.find_reflection_by_name(project, names)
        return None

    def traverse(self, project: ProjectReflection) -> Iterator[Tuple[Reflection, TraverseProperty]]:
        yield from Reflection.traverse(self, project)
        for child_id in list(self.children):
            yield project.registry[child_id], TraverseProperty.CHILDREN


@dataclass(slots=True, eq=False)
class DeclarationReflection(ContainerReflection):
    """
    A single declared entity: a class, a function, a property and so on.

    ``type`` is the value type for variables and properties and the aliased
    type for type aliases. Overloads of one symbol share the declaration and
    each contributes a signature, kept in source order.
    """

    type: Optional[Type] = None
    type_parameters: List[int] = field(default_factory=list)
    signatures: List[int] = field(default_factory=list)
    index_signature: Optional[int] = None
    get_signature: Optional[int] = None
    set_signature: Optional[int] = None
    default_value: Optional[str] = None
    extended_types: List[Type] = field(default_factory=list)
    implemented_types: List[Type] = field(default_factory=list)
    sources: List[SourceReference] = field(default_factory=list)
    symbol_id: Optional[str] = None
    origin_symbol: Optional[str] = None

    def has_getter_or_setter(self) -> bool:
        return self.get_signature is not None or self.set_signature is not None

    def all_signature_ids(self) -> List[int]:
        ids = list(self.signatures)
        for sid in (self.index_signature, self.get_signature, self.set_signature):
            if sid is not None:
                ids.append(sid)
        return ids

    def get_all_signatures(self, project: ProjectReflection) -> List[SignatureReflection]:
        return [project.registry[sid] for sid in self.all_signature_ids()]  # type: ignore[misc]

    def own_types(self) -> List[Optional[Type]]:
        return [self.type, *self.extended_types, *self.implemented_types]

    def find_reflection_by_name(
        self,
        project: ProjectReflection,
        names: Union[str, Sequence[str]],
        search_up: bool = False,
    ) -> Optional[Reflection]:
        """Like the container lookup, but may also walk up the first base type."""
        parts = names.split(".") if isinstance(names, str) else list(names)
        reflection = self.get_child_by_name(project, parts)
        if reflection is not None:
            return reflection
        if search_up and self.extended_types:
            first = self.extended_types[0]
            if isinstance(first, ReferenceType) and first.is_resolved:
                base = project.get(first.target_id)
                if isinstance(base, DeclarationReflection):
                    inherited = base.find_reflection_by_name(project, parts, search_up)
                    if inherited is not None:
                        return inherited
        parent = project.get(self.parent_id)
        if isinstance(parent, ContainerReflection):
            return parent.find_reflection_by_name(project, parts)
        return None

    def traverse(self, project: ProjectReflection) -> Iterator[Tuple[Reflection, TraverseProperty]]:
        for tp_id in list(self.type_parameters):
            yield project.registry[tp_id], TraverseProperty.TYPE_PARAMETER
        yield from Reflection.traverse(self, project)
        for sid in list(self.signatures):
            yield project.registry[sid], TraverseProperty.SIGNATURES
        if self.index_signature is not None:
            yield project.registry[self.index_signature], TraverseProperty.INDEX_SIGNATURE
        if self.get_signature is not None:
            yield project.registry[self.get_signature], TraverseProperty.GET_SIGNATURE
        if self.set_signature is not None:
            yield project.registry[self.set_signature], TraverseProperty.SET_SIGNATURE
        for child_id in list(self.children):
            yield project.registry[child_id], TraverseProperty.CHILDREN

    def __str__(self) -> str:
        result = Reflection.__str__(self)
        if self.type is not None:
            result += ":" + str(self.type)
        return result


@dataclass(slots=True, eq=False)
class SignatureReflection(Reflection):
    parameters: List[int] = field(default_factory=list)
    type: Optional[Type] = None
    type_parameters: List[int] = field(default_factory=list)

    def own_types(self) -> List[Optional[Type]]:
        return [self.type]

    def get_parameters(self, project: ProjectReflection) -> List[ParameterReflection]:
        return [project.registry[pid] for pid in self.parameters]  # type: ignore[misc]

    def traverse(self, project: ProjectReflection) -> Iterator[Tuple[Reflection, TraverseProperty]]:
        for tp_id in list(self.type_parameters):
            yield project.registry[tp_id], TraverseProperty.TYPE_PARAMETER
        yield from Reflection.traverse(self, project)
        for pid in list(self.parameters):
            yield project.registry[pid], TraverseProperty.PARAMETERS


@dataclass(slots=True, eq=False)
class ParameterReflection(Reflection):
    type: Optional[Type] = None
    default_value: Optional[str] = None

    def own_types(self) -> List[Optional[Type]]:
        return [self.type]


@dataclass(slots=True, eq=False)
class TypeParameterReflection(Reflection):
    constraint: Optional[Type] = None
    default: Optional[Type] = None

    def own_types(self) -> List[Optional[Type]]:
        return [self.constraint, self.default]


@dataclass(slots=True, eq=False)
class ProjectReflection(ContainerReflection):
    """Root of the graph and owner of the id registry."""

    registry: IdentityRegistry = field(default_factory=IdentityRegistry, repr=False)
    files: Dict[str, List[int]] = field(default_factory=dict)
    resolved: bool = False

    @classmethod
    def create(cls, name: str = "Documentation", registry: Optional[IdentityRegistry] = None) -> ProjectReflection:
        project = cls(name=name, kind=ReflectionKind.Project, registry=registry or IdentityRegistry())
        project.registry.allocate(project)
        return project

    def add(self, reflection: Reflection) -> Reflection:
        self.registry.allocate(reflection)
        return reflection

    def get(self, rid: Optional[int]) -> Optional[Reflection]:
        return self.registry.get(rid)

    @property
    def reflections(self):
        return self.registry.reflections

    @property
    def symbol_mapping(self):
        return self.registry.symbols

    def declarations(self) -> Iterator[DeclarationReflection]:
        for reflection in self.registry:
            if isinstance(reflection, DeclarationReflection):
                yield reflection

    def note_file(self, file_name: str, reflection: Reflection) -> None:
        bucket = self.files.setdefault(file_name, [])
        if reflection.id not in bucket:
            bucket.append(reflection.id)

    def find_by_name(self, names: Union[str, Sequence[str]]) -> Optional[Reflection]:
        return self.get_child_by_name(self, names)
