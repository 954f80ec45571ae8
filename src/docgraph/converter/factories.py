"""Create (or fetch and merge) reflections for the node converters."""
from __future__ import annotations

from typing import Dict, List, Optional

from ..core.errors import ErrorCode
from ..frontend.nodes import (
    ParameterDescriptor,
    SignatureDescriptor,
    SourceNode,
    TypeParameterDescriptor,
)
from ..models.comments import Comment
from ..models.kinds import (
    NO_FLAGS,
    ReflectionFlag,
    ReflectionKind,
    flags_from_modifiers,
    kind_string,
)
from ..models.reflections import (
    ContainerReflection,
    DeclarationReflection,
    ParameterReflection,
    Reflection,
    SignatureReflection,
    SourceReference,
    TypeParameterReflection,
)
from ..models.types import TypeParameterType
from .context import Context
from .types import convert_type

ACCESSOR_KINDS = ReflectionKind.Accessor | ReflectionKind.Constant
EXPORTING_MODIFIERS = {"export", "declare"}

# Kind pairs that merge silently; the value is the kind the merged declaration keeps.
COMPATIBLE_KINDS: Dict[frozenset, ReflectionKind] = {
    frozenset({ReflectionKind.Class, ReflectionKind.Interface}): ReflectionKind.Class,
    frozenset({ReflectionKind.Accessor, ReflectionKind.Constant}): ReflectionKind.Constant,
    frozenset({ReflectionKind.Namespace, ReflectionKind.Module}): ReflectionKind.Module,
}


def create_declaration(
    context: Context,
    node: SourceNode,
    kind: ReflectionKind,
    name: Optional[str] = None,
) -> Optional[DeclarationReflection]:
    """Return the declaration for ``node``'s symbol, creating it on first sight.

    A later declaration of an already registered symbol merges into the
    existing reflection. None means the node is filtered out, lacks a name
    or symbol, or conflicts with what is already there.
    """
    container = context.scope
    name = name or node.name
    if not name or node.symbol_id is None:
        return None
    if not isinstance(container, ContainerReflection):
        context.report(
            ErrorCode.UNSUPPORTED_CONSTRUCT,
            f"{kind_string(kind)} '{name}' cannot be placed inside {container}",
            symbol=node.symbol_id,
        )
        return None
    if not _passes_filters(context, container, node):
        return None

    flags = flags_from_modifiers(node.modifiers)
    if context.current_file_external:
        flags |= ReflectionFlag.External

    existing = context.lookup(node.symbol_id)
    if existing is not None:
        return _merge_declaration(context, existing, node, kind, flags)

    declaration = DeclarationReflection(
        name=name,
        kind=kind,
        flags=flags,
        comment=node.comment,
        symbol_id=node.symbol_id,
        origin_symbol=node.origin_symbol,
    )
    context.project.add(declaration)
    container.add_child(declaration)
    context.register(declaration, node.symbol_id)
    _note_source(context, declaration, node)
    return declaration


def _passes_filters(context: Context, container: ContainerReflection, node: SourceNode) -> bool:
    settings = context.settings
    if settings.exclude_private and "private" in node.modifiers:
        return False
    if settings.exclude_not_exported and container.kind & (
        ReflectionKind.Project | ReflectionKind.SomeModule
    ):
        if not node.modifiers & EXPORTING_MODIFIERS:
            return False
    return True


def _merge_declaration(
    context: Context,
    existing: Reflection,
    node: SourceNode,
    kind: ReflectionKind,
    flags: ReflectionFlag,
) -> Optional[DeclarationReflection]:
    if not isinstance(existing, DeclarationReflection):
        context.report(
            ErrorCode.MERGE_CONFLICT,
            f"symbol '{node.symbol_id}' already belongs to {existing}",
            symbol=node.symbol_id,
        )
        return None

    if existing.kind != kind:
        compatible = COMPATIBLE_KINDS.get(frozenset({existing.kind, kind}))
        if compatible is not None:
            existing.kind = compatible
        elif bool(existing.kind & ACCESSOR_KINDS) != bool(kind & ACCESSOR_KINDS):
            context.report(
                ErrorCode.MERGE_CONFLICT,
                f"{kind_string(kind)} '{existing.name}' cannot merge into {kind_string(existing.kind)}; "
                "later declaration discarded",
                symbol=node.symbol_id,
                existing=kind_string(existing.kind),
                incoming=kind_string(kind),
            )
            return None
        else:
            context.report(
                ErrorCode.MERGE_CONFLICT,
                f"'{existing.name}' redeclared as {kind_string(kind)} (was {kind_string(existing.kind)})",
                symbol=node.symbol_id,
                existing=kind_string(existing.kind),
                incoming=kind_string(kind),
            )
            existing.kind = kind

    existing.flags |= flags
    if existing.comment is None and node.comment is not None:
        existing.comment = node.comment
    _note_source(context, existing, node)
    return existing


def _note_source(context: Context, declaration: DeclarationReflection, node: SourceNode) -> None:
    file_name = node.file or context.current_file
    if not file_name:
        return
    reference = SourceReference(file_name=file_name, line=node.line)
    if reference not in declaration.sources:
        declaration.sources.append(reference)


def create_type_parameters(
    context: Context,
    owner: Reflection,
    descriptors: List[TypeParameterDescriptor],
) -> Dict[str, TypeParameterType]:
    """Convert type parameters onto ``owner`` and return their name bindings."""
    bindings: Dict[str, TypeParameterType] = {}
    for descriptor in descriptors:
        parameter = TypeParameterReflection(name=descriptor.name, kind=ReflectionKind.TypeParameter)
        context.project.add(parameter)
        parameter.parent_id = owner.id
        owner.type_parameters.append(parameter.id)  # type: ignore[attr-defined]
        # T may appear in its own constraint
        bindings[descriptor.name] = TypeParameterType(descriptor.name)
        with context.scope_of(parameter, bindings):
            parameter.constraint = convert_type(context, descriptor.constraint)
            parameter.default = convert_type(context, descriptor.default)
        bindings[descriptor.name] = TypeParameterType(descriptor.name, parameter.constraint)
    return bindings


def type_parameter_bindings(context: Context, owner: Reflection) -> Dict[str, TypeParameterType]:
    """Bindings for type parameters already converted onto ``owner``."""
    bindings: Dict[str, TypeParameterType] = {}
    for tp_id in getattr(owner, "type_parameters", []):
        parameter = context.project.get(tp_id)
        if isinstance(parameter, TypeParameterReflection):
            bindings[parameter.name] = TypeParameterType(parameter.name, parameter.constraint)
    return bindings


def create_signature(
    context: Context,
    descriptor: SignatureDescriptor,
    name: str,
    kind: ReflectionKind,
    comment: Optional[Comment] = None,
    flags: ReflectionFlag = NO_FLAGS,
) -> SignatureReflection:
    """Build one signature owned by the current scope."""
    owner = context.scope
    signature = SignatureReflection(name=name, kind=kind, flags=flags, comment=comment)
    context.project.add(signature)
    signature.parent_id = owner.id

    bindings = create_type_parameters(context, signature, descriptor.type_parameters)
    with context.scope_of(signature, bindings):
        for parameter in descriptor.parameters:
            created = create_parameter(context, parameter, comment)
            signature.parameters.append(created.id)
        signature.type = convert_type(context, descriptor.return_type)

    _check_parameter_order(context, signature, descriptor.parameters)
    return signature


def create_parameter(
    context: Context,
    descriptor: ParameterDescriptor,
    owner_comment: Optional[Comment] = None,
) -> ParameterReflection:
    flags = NO_FLAGS
    if descriptor.optional or descriptor.default_value is not None:
        flags |= ReflectionFlag.Optional
    if descriptor.rest:
        flags |= ReflectionFlag.Rest

    comment = None
    if owner_comment is not None:
        tag = owner_comment.get_tag("param", descriptor.name)
        if tag is not None and tag.text:
            comment = Comment(summary=tag.text)

    parameter = ParameterReflection(
        name=descriptor.name,
        kind=ReflectionKind.Parameter,
        flags=flags,
        comment=comment,
        default_value=descriptor.default_value,
    )
    context.project.add(parameter)
    parameter.parent_id = context.scope.id
    with context.scope_of(parameter):
        parameter.type = convert_type(context, descriptor.type)
    return parameter


def _check_parameter_order(
    context: Context,
    signature: SignatureReflection,
    parameters: List[ParameterDescriptor],
) -> None:
    seen_optional = False
    for index, parameter in enumerate(parameters):
        if parameter.rest and index != len(parameters) - 1:
            context.report(
                ErrorCode.INVALID_SIGNATURE,
                f"rest parameter '{parameter.name}' of '{signature.name}' is not last",
                signature=signature.id,
            )
            return
        optional = parameter.optional or parameter.default_value is not None
        if optional:
            seen_optional = True
        elif seen_optional and not parameter.rest:
            context.report(
                ErrorCode.INVALID_SIGNATURE,
                f"required parameter '{parameter.name}' of '{signature.name}' follows an optional one",
                signature=signature.id,
            )
            return
