"""Map front-end type descriptors onto the type value model.

Named types become ``ReferenceType`` values that only carry the symbol
identity; the target may not be converted yet, so resolution is left to
the resolver. Structural types (object literals, function types) get a
synthetic ``__type`` declaration converted in place.
"""
from __future__ import annotations

from typing import Optional

from ..frontend.nodes import TypeDescriptor, TypeKind
from ..models.kinds import ReflectionKind
from ..models.reflections import DeclarationReflection
from ..models.types import (
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
from .context import Context

TYPE_LITERAL_NAME = "__type"


def convert_type(context: Context, descriptor: Optional[TypeDescriptor]) -> Optional[Type]:
    if descriptor is None:
        return None
    kind = descriptor.kind
    if kind == TypeKind.INTRINSIC:
        return IntrinsicType(descriptor.name or descriptor.text)
    if kind == TypeKind.REFERENCE:
        return _convert_reference(context, descriptor)
    if kind == TypeKind.UNION:
        return UnionType([_convert_required(context, arg) for arg in descriptor.arguments])
    if kind == TypeKind.INTERSECTION:
        return IntersectionType([_convert_required(context, arg) for arg in descriptor.arguments])
    if kind == TypeKind.ARRAY:
        if not descriptor.arguments:
            return UnknownType(descriptor.text or "unknown[]")
        return ArrayType(_convert_required(context, descriptor.arguments[0]))
    if kind == TypeKind.TUPLE:
        return TupleType([_convert_required(context, arg) for arg in descriptor.arguments])
    if kind == TypeKind.STRING_LITERAL:
        return StringLiteralType(descriptor.name or "")
    if kind == TypeKind.OBJECT:
        return _convert_type_literal(context, descriptor)
    if kind == TypeKind.FUNCTION:
        return _convert_function_type(context, descriptor)
    return UnknownType(descriptor.text or descriptor.name or "unknown")


def _convert_required(context: Context, descriptor: TypeDescriptor) -> Type:
    converted = convert_type(context, descriptor)
    return converted if converted is not None else UnknownType(descriptor.text)


def _convert_reference(context: Context, descriptor: TypeDescriptor) -> Type:
    name = descriptor.name or descriptor.text
    bound = context.type_parameters.get(name)
    if bound is not None and not descriptor.arguments:
        return TypeParameterType(bound.name)
    arguments = [_convert_required(context, arg) for arg in descriptor.arguments]
    return ReferenceType(name=name, symbol_id=descriptor.symbol_id, type_arguments=arguments)


def _create_type_literal(context: Context) -> DeclarationReflection:
    literal = DeclarationReflection(name=TYPE_LITERAL_NAME, kind=ReflectionKind.TypeLiteral)
    context.project.add(literal)
    literal.parent_id = context.scope.id
    return literal


def _convert_type_literal(context: Context, descriptor: TypeDescriptor) -> Type:
    from .nodes import convert_nodes

    literal = _create_type_literal(context)
    with context.scope_of(literal):
        convert_nodes(context, descriptor.members)
    return ReflectionType(literal.id)


def _convert_function_type(context: Context, descriptor: TypeDescriptor) -> Type:
    from .factories import create_signature

    literal = _create_type_literal(context)
    if descriptor.signature is not None:
        with context.scope_of(literal):
            signature = create_signature(
                context,
                descriptor.signature,
                name=TYPE_LITERAL_NAME,
                kind=ReflectionKind.CallSignature,
            )
        literal.signatures.append(signature.id)
    return ReflectionType(literal.id)
