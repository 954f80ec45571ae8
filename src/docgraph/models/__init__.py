from .comments import Comment, CommentTag, parse_comment
from .kinds import ReflectionFlag, ReflectionKind, flags_from_modifiers, flags_to_dict, kind_string
from .reflections import (
    ContainerReflection,
    DeclarationReflection,
    ParameterReflection,
    ProjectReflection,
    Reflection,
    SignatureReflection,
    SourceReference,
    TraverseProperty,
    TypeParameterReflection,
)
from .registry import IdentityRegistry
from .types import (
    ArrayType,
    IntersectionType,
    IntrinsicType,
    ReferenceType,
    ReflectionType,
    StringLiteralType,
    TupleType,
    Type,
    TypeParameterType,
    UnionType,
    UnknownType,
)

__all__ = [
    "ArrayType",
    "Comment",
    "CommentTag",
    "ContainerReflection",
    "DeclarationReflection",
    "IdentityRegistry",
    "IntersectionType",
    "IntrinsicType",
    "ParameterReflection",
    "ProjectReflection",
    "ReferenceType",
    "Reflection",
    "ReflectionFlag",
    "ReflectionKind",
    "ReflectionType",
    "SignatureReflection",
    "SourceReference",
    "StringLiteralType",
    "TraverseProperty",
    "TupleType",
    "Type",
    "TypeParameterReflection",
    "TypeParameterType",
    "UnionType",
    "UnknownType",
    "flags_from_modifiers",
    "flags_to_dict",
    "kind_string",
    "parse_comment",
]
