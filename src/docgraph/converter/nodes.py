"""One converter per front-end node kind.

``convert_node`` dispatches through ``NODE_CONVERTERS``, a fixed table;
kinds missing from it are reported as unsupported and skipped.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Iterable, List, Mapping, Optional

from ..core.errors import ErrorCode
from ..frontend.nodes import NodeKind, SignatureDescriptor, SourceNode, TypeDescriptor
from ..models.kinds import ReflectionFlag, ReflectionKind, flags_from_modifiers, kind_string
from ..models.reflections import DeclarationReflection, Reflection
from ..models.types import ReferenceType, Type, iter_reflection_types
from .context import Context
from .factories import (
    create_declaration,
    create_signature,
    create_type_parameters,
    type_parameter_bindings,
)
from .types import convert_type

NodeConverter = Callable[[Context, SourceNode], Optional[Reflection]]


def convert_node(context: Context, node: SourceNode) -> Optional[Reflection]:
    converter = NODE_CONVERTERS.get(node.kind)
    if converter is None:
        context.report(
            ErrorCode.UNSUPPORTED_CONSTRUCT,
            f"no converter for {node.raw_kind or node.kind.value} '{node.name or '?'}'",
            kind=node.raw_kind or node.kind.value,
            line=node.line,
        )
        return None
    return converter(context, node)


def convert_nodes(context: Context, nodes: Iterable[SourceNode]) -> List[Reflection]:
    converted: List[Reflection] = []
    for node in nodes:
        reflection = convert_node(context, node)
        if reflection is not None:
            converted.append(reflection)
    return converted


# --- containers ---------------------------------------------------------


def _container_converter(kind: ReflectionKind) -> NodeConverter:
    def convert(context: Context, node: SourceNode) -> Optional[Reflection]:
        declaration = create_declaration(context, node, kind)
        if declaration is None:
            return None
        with context.scope_of(declaration):
            convert_nodes(context, node.children)
        return declaration

    convert.__name__ = f"convert_{kind.name.lower()}"
    return convert


def _convert_class_like(context: Context, node: SourceNode, kind: ReflectionKind) -> Optional[Reflection]:
    declaration = create_declaration(context, node, kind)
    if declaration is None:
        return None
    if declaration.type_parameters:
        bindings = type_parameter_bindings(context, declaration)
    else:
        bindings = create_type_parameters(context, declaration, node.type_parameters)

    with context.scope_of(declaration, bindings):
        _extend_unique(declaration.extended_types, _convert_all(context, node.extends))
        _extend_unique(declaration.implemented_types, _convert_all(context, node.implements))
        convert_nodes(context, node.children)
    return declaration


def convert_class(context: Context, node: SourceNode) -> Optional[Reflection]:
    return _convert_class_like(context, node, ReflectionKind.Class)


def convert_interface(context: Context, node: SourceNode) -> Optional[Reflection]:
    return _convert_class_like(context, node, ReflectionKind.Interface)


def _convert_all(context: Context, descriptors: Iterable[TypeDescriptor]) -> List[Type]:
    converted = []
    for descriptor in descriptors:
        result = convert_type(context, descriptor)
        if result is not None:
            converted.append(result)
    return converted


def _extend_unique(target: List[Type], types: Iterable[Type]) -> None:
    """Append heritage types, skipping ones a merged declaration already lists.

    A repeat that carries an inline type literal is kept, since the literal
    was already created under the declaration and must stay owned by it.
    """
    known = {_heritage_key(t) for t in target}
    for item in types:
        key = _heritage_key(item)
        if key in known and next(iter_reflection_types([item]), None) is None:
            continue
        known.add(key)
        target.append(item)


def _heritage_key(item: Type) -> str:
    if isinstance(item, ReferenceType) and item.symbol_id:
        return f"{item.symbol_id}{str(item)[len(item.name):]}"
    return str(item)


# --- functions and signatures ------------------------------------------

SIGNATURE_KINDS = {
    ReflectionKind.Function: ReflectionKind.CallSignature,
    ReflectionKind.Method: ReflectionKind.CallSignature,
    ReflectionKind.Constructor: ReflectionKind.ConstructorSignature,
}


def _function_converter(kind: ReflectionKind) -> NodeConverter:
    def convert(context: Context, node: SourceNode) -> Optional[Reflection]:
        name = node.name
        if kind == ReflectionKind.Constructor:
            name = "constructor"
        declaration = create_declaration(context, node, kind, name=name)
        if declaration is None:
            return None
        signature_name = declaration.name
        if kind == ReflectionKind.Constructor:
            owner = context.scope
            signature_name = f"new {owner.name}"
        with context.scope_of(declaration):
            signature = create_signature(
                context,
                node.signature or SignatureDescriptor(),
                name=signature_name,
                kind=SIGNATURE_KINDS[kind],
                comment=node.comment.copy() if node.comment else None,
                flags=_signature_flags(node),
            )
        declaration.signatures.append(signature.id)
        return declaration

    convert.__name__ = f"convert_{kind.name.lower()}"
    return convert


def _signature_flags(node: SourceNode) -> ReflectionFlag:
    flags = flags_from_modifiers(node.modifiers)
    return flags & (ReflectionFlag.Static | ReflectionFlag.Abstract | ReflectionFlag.Exported)


def _scope_signature_converter(kind: ReflectionKind, name: str) -> NodeConverter:
    """Call and construct signatures attach directly to the enclosing declaration."""

    def convert(context: Context, node: SourceNode) -> Optional[Reflection]:
        owner = context.scope
        if not isinstance(owner, DeclarationReflection):
            context.report(
                ErrorCode.UNSUPPORTED_CONSTRUCT,
                f"{kind_string(kind)} outside of a declaration",
                line=node.line,
            )
            return None
        signature = create_signature(
            context,
            node.signature or SignatureDescriptor(),
            name=name,
            kind=kind,
            comment=node.comment,
        )
        owner.signatures.append(signature.id)
        return signature

    convert.__name__ = f"convert_{kind.name.lower()}"
    return convert


def convert_index_signature(context: Context, node: SourceNode) -> Optional[Reflection]:
    owner = context.scope
    if not isinstance(owner, DeclarationReflection):
        context.report(
            ErrorCode.UNSUPPORTED_CONSTRUCT,
            "index signature outside of a declaration",
            line=node.line,
        )
        return None
    if owner.index_signature is not None:
        context.report(
            ErrorCode.MERGE_CONFLICT,
            f"'{owner.name}' already has an index signature; later one discarded",
            symbol=owner.symbol_id,
        )
        return None
    signature = create_signature(
        context,
        node.signature or SignatureDescriptor(),
        name="__index",
        kind=ReflectionKind.IndexSignature,
        comment=node.comment,
    )
    owner.index_signature = signature.id
    return signature


# --- accessors ---------------------------------------------------------


def convert_accessor(context: Context, node: SourceNode) -> Optional[Reflection]:
    kind = ReflectionKind.Accessor
    scope = context.scope
    if scope.kind & ReflectionKind.ClassOrInterface:
        if node.comment is not None and node.comment.has_tag("constant"):
            kind = ReflectionKind.Constant
    declaration = create_declaration(context, node, kind)
    if declaration is None:
        return None

    with context.scope_of(declaration):
        if declaration.kind == ReflectionKind.Constant:
            if declaration.type is None:
                declaration.type = convert_type(context, _accessor_type(node))
            return declaration

        is_getter = node.kind == NodeKind.GET_ACCESSOR
        slot = "get_signature" if is_getter else "set_signature"
        if getattr(declaration, slot) is not None:
            context.report(
                ErrorCode.MERGE_CONFLICT,
                f"'{declaration.name}' already has a {'getter' if is_getter else 'setter'}; "
                "later one discarded",
                symbol=node.symbol_id,
            )
            return declaration
        signature = create_signature(
            context,
            node.signature or SignatureDescriptor(),
            name="__get" if is_getter else "__set",
            kind=ReflectionKind.GetSignature if is_getter else ReflectionKind.SetSignature,
            comment=node.comment.copy() if node.comment else None,
        )
        setattr(declaration, slot, signature.id)
    return declaration


def _accessor_type(node: SourceNode) -> Optional[TypeDescriptor]:
    if node.type is not None:
        return node.type
    if node.signature is None:
        return None
    if node.kind == NodeKind.GET_ACCESSOR:
        return node.signature.return_type
    if node.signature.parameters:
        return node.signature.parameters[0].type
    return None


# --- values ------------------------------------------------------------


def _value_converter(kind: ReflectionKind) -> NodeConverter:
    def convert(context: Context, node: SourceNode) -> Optional[Reflection]:
        declaration = create_declaration(context, node, kind)
        if declaration is None:
            return None
        with context.scope_of(declaration):
            if declaration.type is None:
                declaration.type = convert_type(context, node.type)
        if declaration.default_value is None:
            declaration.default_value = node.default_value
        return declaration

    convert.__name__ = f"convert_{kind.name.lower()}"
    return convert


def convert_type_alias(context: Context, node: SourceNode) -> Optional[Reflection]:
    declaration = create_declaration(context, node, ReflectionKind.TypeAlias)
    if declaration is None:
        return None
    if declaration.type is not None:
        context.report(
            ErrorCode.MERGE_CONFLICT,
            f"type alias '{declaration.name}' declared twice; later one discarded",
            symbol=node.symbol_id,
        )
        return declaration
    bindings = create_type_parameters(context, declaration, node.type_parameters)
    with context.scope_of(declaration, bindings):
        declaration.type = convert_type(context, node.type)
    return declaration


NODE_CONVERTERS: Mapping[NodeKind, NodeConverter] = MappingProxyType(
    {
        NodeKind.MODULE: _container_converter(ReflectionKind.Module),
        NodeKind.NAMESPACE: _container_converter(ReflectionKind.Namespace),
        NodeKind.ENUM: _container_converter(ReflectionKind.Enum),
        NodeKind.CLASS: convert_class,
        NodeKind.INTERFACE: convert_interface,
        NodeKind.FUNCTION: _function_converter(ReflectionKind.Function),
        NodeKind.METHOD: _function_converter(ReflectionKind.Method),
        NodeKind.CONSTRUCTOR: _function_converter(ReflectionKind.Constructor),
        NodeKind.CALL_SIGNATURE: _scope_signature_converter(ReflectionKind.CallSignature, "__call"),
        NodeKind.CONSTRUCT_SIGNATURE: _scope_signature_converter(
            ReflectionKind.ConstructorSignature, "__new"
        ),
        NodeKind.INDEX_SIGNATURE: convert_index_signature,
        NodeKind.GET_ACCESSOR: convert_accessor,
        NodeKind.SET_ACCESSOR: convert_accessor,
        NodeKind.VARIABLE: _value_converter(ReflectionKind.Variable),
        NodeKind.PROPERTY: _value_converter(ReflectionKind.Property),
        NodeKind.ENUM_MEMBER: _value_converter(ReflectionKind.EnumMember),
        NodeKind.TYPE_ALIAS: convert_type_alias,
    }
)
