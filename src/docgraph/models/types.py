"""Type values referenced by reflections.

Types are plain values. They are never owned by the graph: a reflection
holds them, and a ``ReflectionType`` only points at an inline declaration
by id. ``ReferenceType`` carries the front end's symbol identity and is
resolved to a target reflection id by the resolver, never before.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, Iterable, Iterator, List, Optional

# Expands a ReflectionType's declaration id into its serialized form.
DeclarationExpander = Callable[[int], Dict[str, Any]]


class Type:
    __slots__ = ()

    type_name: ClassVar[str] = "unknown"

    def children(self) -> Iterable[Type]:
        return ()

    def walk(self) -> Iterator[Type]:
        """Yield this type and every nested type, depth first."""
        yield self
        for child in self.children():
            yield from child.walk()

    def to_dict(self, expand: Optional[DeclarationExpander] = None) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass(slots=True)
class IntrinsicType(Type):
    name: str

    type_name: ClassVar[str] = "intrinsic"

    def to_dict(self, expand=None):
        return {"type": self.type_name, "name": self.name}

    def __str__(self) -> str:
        return self.name


@dataclass(slots=True)
class StringLiteralType(Type):
    value: str

    type_name: ClassVar[str] = "stringLiteral"

    def to_dict(self, expand=None):
        return {"type": self.type_name, "value": self.value}

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass(slots=True)
class UnknownType(Type):
    name: str

    type_name: ClassVar[str] = "unknown"

    def to_dict(self, expand=None):
        return {"type": self.type_name, "name": self.name}

    def __str__(self) -> str:
        return self.name


@dataclass(slots=True)
class TypeParameterType(Type):
    name: str
    constraint: Optional[Type] = None

    type_name: ClassVar[str] = "typeParameter"

    def children(self):
        return (self.constraint,) if self.constraint is not None else ()

    def to_dict(self, expand=None):
        data: Dict[str, Any] = {"type": self.type_name, "name": self.name}
        if self.constraint is not None:
            data["constraint"] = self.constraint.to_dict(expand)
        return data

    def __str__(self) -> str:
        return self.name


@dataclass(slots=True)
class ReferenceType(Type):
    name: str
    symbol_id: Optional[str] = None
    type_arguments: List[Type] = field(default_factory=list)
    target_id: Optional[int] = None

    type_name: ClassVar[str] = "reference"

    @property
    def is_resolved(self) -> bool:
        return self.target_id is not None

    def children(self):
        return self.type_arguments

    def to_dict(self, expand=None):
        data: Dict[str, Any] = {"type": self.type_name, "name": self.name}
        if self.target_id is not None:
            data["id"] = self.target_id
        if self.type_arguments:
            data["typeArguments"] = [arg.to_dict(expand) for arg in self.type_arguments]
        return data

    def __str__(self) -> str:
        if self.type_arguments:
            args = ", ".join(str(arg) for arg in self.type_arguments)
            return f"{self.name}<{args}>"
        return self.name


@dataclass(slots=True)
class ReflectionType(Type):
    declaration_id: int

    type_name: ClassVar[str] = "reflection"

    def to_dict(self, expand=None):
        if expand is None:
            return {"type": self.type_name, "declaration": {"id": self.declaration_id}}
        return {"type": self.type_name, "declaration": expand(self.declaration_id)}

    def __str__(self) -> str:
        return "object"


@dataclass(slots=True)
class UnionType(Type):
    types: List[Type] = field(default_factory=list)

    type_name: ClassVar[str] = "union"

    def children(self):
        return self.types

    def to_dict(self, expand=None):
        return {"type": self.type_name, "types": [t.to_dict(expand) for t in self.types]}

    def __str__(self) -> str:
        return " | ".join(str(t) for t in self.types)


@dataclass(slots=True)
class IntersectionType(Type):
    types: List[Type] = field(default_factory=list)

    type_name: ClassVar[str] = "intersection"

    def children(self):
        return self.types

    def to_dict(self, expand=None):
        return {"type": self.type_name, "types": [t.to_dict(expand) for t in self.types]}

    def __str__(self) -> str:
        return " & ".join(str(t) for t in self.types)


@dataclass(slots=True)
class ArrayType(Type):
    element_type: Type

    type_name: ClassVar[str] = "array"

    def children(self):
        return (self.element_type,)

    def to_dict(self, expand=None):
        return {"type": self.type_name, "elementType": self.element_type.to_dict(expand)}

    def __str__(self) -> str:
        element = str(self.element_type)
        if isinstance(self.element_type, (UnionType, IntersectionType)):
            element = f"({element})"
        return f"{element}[]"


@dataclass(slots=True)
class TupleType(Type):
    elements: List[Type] = field(default_factory=list)

    type_name: ClassVar[str] = "tuple"

    def children(self):
        return self.elements

    def to_dict(self, expand=None):
        return {"type": self.type_name, "elements": [t.to_dict(expand) for t in self.elements]}

    def __str__(self) -> str:
        return "[" + ", ".join(str(t) for t in self.elements) + "]"


def iter_references(types: Iterable[Optional[Type]]) -> Iterator[ReferenceType]:
    for root in types:
        if root is None:
            continue
        for node in root.walk():
            if isinstance(node, ReferenceType):
                yield node


def iter_reflection_types(types: Iterable[Optional[Type]]) -> Iterator[ReflectionType]:
    for root in types:
        if root is None:
            continue
        for node in root.walk():
            if isinstance(node, ReflectionType):
                yield node
