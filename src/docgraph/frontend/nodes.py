"""Values the front end hands to the converter.

A front end (a type checker, or the tree-sitter reader in
``docgraph.frontend.typescript``) reduces its AST to these records. The
converter reads nothing else: node kind, name, symbol identity, children,
the written type, the signature shape and the doc comment.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set

from ..models.comments import Comment


class NodeKind(str, Enum):
    MODULE = "module"
    NAMESPACE = "namespace"
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    ENUM_MEMBER = "enum_member"
    VARIABLE = "variable"
    PROPERTY = "property"
    FUNCTION = "function"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    GET_ACCESSOR = "get_accessor"
    SET_ACCESSOR = "set_accessor"
    CALL_SIGNATURE = "call_signature"
    CONSTRUCT_SIGNATURE = "construct_signature"
    INDEX_SIGNATURE = "index_signature"
    TYPE_ALIAS = "type_alias"
    # Anything the front end recognised as a declaration but cannot describe.
    OTHER = "other"


class TypeKind(str, Enum):
    INTRINSIC = "intrinsic"
    REFERENCE = "reference"
    OBJECT = "object"
    FUNCTION = "function"
    UNION = "union"
    INTERSECTION = "intersection"
    ARRAY = "array"
    TUPLE = "tuple"
    STRING_LITERAL = "string_literal"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class TypeDescriptor:
    """What the front end knows about one written type."""

    kind: TypeKind
    name: Optional[str] = None
    symbol_id: Optional[str] = None
    arguments: List[TypeDescriptor] = field(default_factory=list)
    members: List[SourceNode] = field(default_factory=list)
    signature: Optional[SignatureDescriptor] = None
    text: str = ""

    @classmethod
    def intrinsic(cls, name: str) -> TypeDescriptor:
        return cls(TypeKind.INTRINSIC, name=name, text=name)

    @classmethod
    def reference(
        cls,
        name: str,
        symbol_id: Optional[str] = None,
        arguments: Optional[List[TypeDescriptor]] = None,
    ) -> TypeDescriptor:
        return cls(TypeKind.REFERENCE, name=name, symbol_id=symbol_id, arguments=list(arguments or []), text=name)

    @classmethod
    def object(cls, members: List[SourceNode]) -> TypeDescriptor:
        return cls(TypeKind.OBJECT, members=list(members))

    @classmethod
    def function(cls, signature: SignatureDescriptor) -> TypeDescriptor:
        return cls(TypeKind.FUNCTION, signature=signature)

    @classmethod
    def union(cls, *types: TypeDescriptor) -> TypeDescriptor:
        return cls(TypeKind.UNION, arguments=list(types))

    @classmethod
    def intersection(cls, *types: TypeDescriptor) -> TypeDescriptor:
        return cls(TypeKind.INTERSECTION, arguments=list(types))

    @classmethod
    def array(cls, element: TypeDescriptor) -> TypeDescriptor:
        return cls(TypeKind.ARRAY, arguments=[element])

    @classmethod
    def tuple(cls, *elements: TypeDescriptor) -> TypeDescriptor:
        return cls(TypeKind.TUPLE, arguments=list(elements))

    @classmethod
    def string_literal(cls, value: str) -> TypeDescriptor:
        return cls(TypeKind.STRING_LITERAL, name=value, text=f'"{value}"')

    @classmethod
    def unknown(cls, text: str) -> TypeDescriptor:
        return cls(TypeKind.UNKNOWN, text=text)


@dataclass(slots=True)
class TypeParameterDescriptor:
    name: str
    constraint: Optional[TypeDescriptor] = None
    default: Optional[TypeDescriptor] = None


@dataclass(slots=True)
class ParameterDescriptor:
    name: str
    type: Optional[TypeDescriptor] = None
    optional: bool = False
    rest: bool = False
    default_value: Optional[str] = None


@dataclass(slots=True)
class SignatureDescriptor:
    parameters: List[ParameterDescriptor] = field(default_factory=list)
    return_type: Optional[TypeDescriptor] = None
    type_parameters: List[TypeParameterDescriptor] = field(default_factory=list)


@dataclass(slots=True)
class SourceNode:
    """One declaration as seen by the front end.

    ``symbol_id`` is the merge key: every declaration of the same entity
    (overloads, partial interfaces, getter and setter) carries the same one.
    ``origin_symbol`` is set on members the front end copied from a base type.
    """

    kind: NodeKind
    name: Optional[str] = None
    symbol_id: Optional[str] = None
    children: List[SourceNode] = field(default_factory=list)
    modifiers: Set[str] = field(default_factory=set)
    type: Optional[TypeDescriptor] = None
    signature: Optional[SignatureDescriptor] = None
    type_parameters: List[TypeParameterDescriptor] = field(default_factory=list)
    extends: List[TypeDescriptor] = field(default_factory=list)
    implements: List[TypeDescriptor] = field(default_factory=list)
    comment: Optional[Comment] = None
    default_value: Optional[str] = None
    origin_symbol: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None
    raw_kind: Optional[str] = None


@dataclass(slots=True)
class SourceFile:
    """Top-level nodes of one input file."""

    file_name: str
    nodes: List[SourceNode] = field(default_factory=list)
    module_name: Optional[str] = None
    module_symbol: Optional[str] = None
    comment: Optional[Comment] = None
    is_external: bool = False
