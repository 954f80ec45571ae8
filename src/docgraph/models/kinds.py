from __future__ import annotations

from enum import IntFlag
from typing import Dict, Iterable


class ReflectionKind(IntFlag):
    Project = 1
    Module = 2
    Namespace = 4
    Enum = 8
    EnumMember = 16
    Variable = 32
    Function = 64
    Class = 128
    Interface = 256
    Constructor = 512
    Property = 1024
    Method = 2048
    CallSignature = 4096
    IndexSignature = 8192
    ConstructorSignature = 16384
    Parameter = 32768
    TypeLiteral = 65536
    TypeParameter = 131072
    Accessor = 262144
    GetSignature = 524288
    SetSignature = 1048576
    TypeAlias = 2097152
    Constant = 4194304

    # group masks
    ClassOrInterface = Class | Interface
    SomeModule = Module | Namespace
    SomeSignature = (
        CallSignature | IndexSignature | ConstructorSignature | GetSignature | SetSignature
    )
    FunctionOrMethod = Function | Method
    VariableOrProperty = Variable | Property


KIND_STRINGS: Dict[ReflectionKind, str] = {
    ReflectionKind.Project: "Project",
    ReflectionKind.Module: "Module",
    ReflectionKind.Namespace: "Namespace",
    ReflectionKind.Enum: "Enumeration",
    ReflectionKind.EnumMember: "Enumeration member",
    ReflectionKind.Variable: "Variable",
    ReflectionKind.Function: "Function",
    ReflectionKind.Class: "Class",
    ReflectionKind.Interface: "Interface",
    ReflectionKind.Constructor: "Constructor",
    ReflectionKind.Property: "Property",
    ReflectionKind.Method: "Method",
    ReflectionKind.CallSignature: "Call signature",
    ReflectionKind.IndexSignature: "Index signature",
    ReflectionKind.ConstructorSignature: "Constructor signature",
    ReflectionKind.Parameter: "Parameter",
    ReflectionKind.TypeLiteral: "Type literal",
    ReflectionKind.TypeParameter: "Type parameter",
    ReflectionKind.Accessor: "Accessor",
    ReflectionKind.GetSignature: "Get signature",
    ReflectionKind.SetSignature: "Set signature",
    ReflectionKind.TypeAlias: "Type alias",
    ReflectionKind.Constant: "Constant",
}


def kind_string(kind: ReflectionKind) -> str:
    return KIND_STRINGS.get(kind, kind.name or str(int(kind)))


class ReflectionFlag(IntFlag):
    Exported = 1
    Private = 2
    Protected = 4
    Public = 8
    Static = 16
    Abstract = 32
    Optional = 64
    Rest = 128
    External = 256
    Readonly = 512
    Const = 1024


NO_FLAGS = ReflectionFlag(0)

# Front-end modifier keywords and the flag each one sets.
MODIFIER_FLAGS: Dict[str, ReflectionFlag] = {
    "export": ReflectionFlag.Exported,
    "private": ReflectionFlag.Private,
    "protected": ReflectionFlag.Protected,
    "public": ReflectionFlag.Public,
    "static": ReflectionFlag.Static,
    "abstract": ReflectionFlag.Abstract,
    "optional": ReflectionFlag.Optional,
    "rest": ReflectionFlag.Rest,
    "external": ReflectionFlag.External,
    "readonly": ReflectionFlag.Readonly,
    "const": ReflectionFlag.Const,
}


def flags_from_modifiers(modifiers: Iterable[str]) -> ReflectionFlag:
    flags = NO_FLAGS
    for modifier in modifiers:
        flags |= MODIFIER_FLAGS.get(modifier, NO_FLAGS)
    return flags


def flags_to_dict(flags: ReflectionFlag) -> Dict[str, bool]:
    """Render flags the way templates expect them, e.g. ``{"isStatic": True}``."""
    return {f"is{flag.name}": True for flag in ReflectionFlag if flag in flags}
