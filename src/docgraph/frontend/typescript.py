"""Tree-sitter based reader for TypeScript sources.

The reader reports what is written: declarations, their written types and
signatures, and the JSDoc block in front of them. The one addition is the
members a class or interface inherits from the types it extends. Every
declaration gets a symbol identity derived from where it is declared:

- top-level declarations use their name (``modules`` mode prefixes the
  module symbol, e.g. ``"src/point".Point``)
- namespace members use ``Namespace.name``
- instance members use ``Owner#name``; static members ``Owner.name``
- members of object type literals hang off ``owner:__type@<offset>``
- members inherited from a base are copied in under the derived owner
  and keep the base member in ``origin_symbol``

Names used in type positions are bound only after every file has been
read, so a class may extend one declared further down or in a later file.
"""
from __future__ import annotations

import os
import posixpath
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

import structlog
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from ..core.errors import FrontEndError
from ..models.comments import Comment, parse_comment
from .base import FrontEnd
from .nodes import (
    NodeKind,
    ParameterDescriptor,
    SignatureDescriptor,
    SourceFile,
    SourceNode,
    TypeDescriptor,
    TypeParameterDescriptor,
)

log = structlog.get_logger()

SOURCE_SUFFIXES = (".ts", ".tsx", ".mts", ".cts")
DECLARATION_SUFFIXES = (".d.ts", ".d.mts", ".d.cts")

MODIFIER_TOKENS = {"static", "readonly", "abstract", "async", "declare"}
CLASS_NODE_TYPES = {"class_declaration", "abstract_class_declaration"}
FUNCTION_NODE_TYPES = {"function_declaration", "generator_function_declaration", "function_signature"}
NAMESPACE_NODE_TYPES = {"internal_module", "module"}
VARIABLE_NODE_TYPES = {"lexical_declaration", "variable_declaration"}
FUNCTION_VALUE_TYPES = {"arrow_function", "function_expression", "function"}

# Bodiless overload signatures; the implementation that follows them is dropped.
SIGNATURE_ONLY_KINDS = {"function_signature", "method_signature"}
IMPLEMENTATION_KINDS = {"function_declaration", "method_definition"}

MODULE_COMMENT_TAGS = ("module", "packagedocumentation")

# Members a derived class or interface receives from its bases.
INHERITED_MEMBER_KINDS = {NodeKind.METHOD, NodeKind.PROPERTY, NodeKind.GET_ACCESSOR, NodeKind.SET_ACCESSOR}


@dataclass(slots=True)
class _PendingReference:
    descriptor: TypeDescriptor
    scopes: Tuple[str, ...]
    imports: Dict[str, str]


@dataclass
class SymbolBinder:
    """Collects declared symbols and binds type references once all files are read."""

    symbols: Set[str] = field(default_factory=set)
    pending: List[_PendingReference] = field(default_factory=list)

    def declare(self, symbol_id: str) -> str:
        self.symbols.add(symbol_id)
        return symbol_id

    def defer(self, descriptor: TypeDescriptor, scopes: Tuple[str, ...], imports: Dict[str, str]) -> None:
        self.pending.append(_PendingReference(descriptor, scopes, imports))

    def bind(self) -> int:
        """Bind every deferred reference; returns how many matched no declaration."""
        unbound = 0
        for pending in self.pending:
            symbol_id = self._lookup(pending)
            if symbol_id is None:
                unbound += 1
                symbol_id = pending.descriptor.name
            pending.descriptor.symbol_id = symbol_id
        self.pending.clear()
        return unbound

    def _lookup(self, pending: _PendingReference) -> Optional[str]:
        name = pending.descriptor.name or ""
        for scope in pending.scopes:
            candidate = f"{scope}.{name}" if scope else name
            if candidate in self.symbols:
                return candidate
        head, _, tail = name.partition(".")
        target = pending.imports.get(head)
        if target is not None:
            if target and tail:
                candidate = f"{target}.{tail}"
            else:
                candidate = target or tail
            if candidate in self.symbols:
                return candidate
        return None


class TypeScriptFrontEnd(FrontEnd):
    language = "typescript"

    def __init__(self, mode: str = "file") -> None:
        self.mode = mode
        self._language = Language(tree_sitter_typescript.language_typescript())
        self._parser = Parser(self._language)

    # --- public API ---
    def read(self, paths: Sequence[Path], root: Path | None = None) -> List[SourceFile]:
        files = discover_sources(paths)
        if not files:
            raise FrontEndError.no_input()
        base = root or _common_root(files)
        sources: List[Tuple[str, str]] = []
        for path in files:
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise FrontEndError.read_error(str(path), str(exc)) from exc
            sources.append((_display_name(path, base), text))
        return self.read_sources(sources)

    def read_sources(self, sources: Iterable[Tuple[str, str]]) -> List[SourceFile]:
        """Read in-memory ``(file_name, text)`` pairs as one program."""
        binder = SymbolBinder()
        files = [self._read_file(file_name, text, binder) for file_name, text in sources]
        unbound = binder.bind()
        inherited = _inherit_members(files)
        log.debug(
            "frontend.bound",
            files=len(files),
            symbols=len(binder.symbols),
            unbound=unbound,
            inherited=inherited,
        )
        return files

    # --- helpers ---
    def _read_file(self, file_name: str, text: str, binder: SymbolBinder) -> SourceFile:
        source_bytes = text.encode("utf-8")
        tree = self._parser.parse(source_bytes)
        root = tree.root_node
        if root.has_error:
            log.warning("frontend.parse_error", file=file_name)

        module_name = module_symbol = None
        prefix = ""
        if self.mode == "modules":
            module_name = module_symbol = f'"{_module_path(file_name)}"'
            prefix = binder.declare(module_symbol)

        reader = _FileReader(source_bytes, file_name, binder, modules_mode=self.mode == "modules")
        nodes = reader.statements(root, prefix, (prefix, "") if prefix else ("",))
        log.debug("frontend.file_read", file=file_name, declarations=len(nodes))
        return SourceFile(
            file_name=file_name,
            nodes=nodes,
            module_name=module_name,
            module_symbol=module_symbol,
            comment=reader.module_comment(root),
        )


class _FileReader:
    def __init__(self, source: bytes, file_name: str, binder: SymbolBinder, modules_mode: bool) -> None:
        self._source = source
        self._file_name = file_name
        self._binder = binder
        self._modules_mode = modules_mode
        self._imports: Dict[str, str] = {}

    # --- statements ---
    def statements(self, parent: Node, prefix: str, scopes: Tuple[str, ...]) -> List[SourceNode]:
        nodes: List[SourceNode] = []
        for child in _named(parent):
            nodes.extend(self._statement(child, prefix, scopes, set(), child))
        return _without_overload_implementations(nodes)

    def _statement(
        self,
        node: Node,
        prefix: str,
        scopes: Tuple[str, ...],
        modifiers: Set[str],
        anchor: Node,
    ) -> List[SourceNode]:
        kind = node.type
        if kind == "export_statement":
            declaration = node.child_by_field_name("declaration")
            if declaration is None:
                return []
            return self._statement(declaration, prefix, scopes, modifiers | {"export"}, anchor)
        if kind == "ambient_declaration":
            result: List[SourceNode] = []
            for child in _named(node):
                if child.type == "statement_block":
                    # declare global { ... }
                    result.extend(self.statements(child, "", ("",)))
                else:
                    result.extend(self._statement(child, prefix, scopes, modifiers | {"declare"}, anchor))
            return result
        if kind == "expression_statement":
            result = []
            for child in _named(node):
                if child.type in NAMESPACE_NODE_TYPES:
                    result.extend(self._statement(child, prefix, scopes, modifiers, anchor))
            return result
        if kind == "import_statement":
            self._note_import(node)
            return []
        if kind in CLASS_NODE_TYPES:
            return [self._class(node, prefix, scopes, modifiers, anchor)]
        if kind == "interface_declaration":
            return [self._interface(node, prefix, scopes, modifiers, anchor)]
        if kind in FUNCTION_NODE_TYPES:
            return [self._function(node, prefix, scopes, modifiers, anchor)]
        if kind == "enum_declaration":
            return [self._enum(node, prefix, modifiers, anchor)]
        if kind in VARIABLE_NODE_TYPES:
            return self._variables(node, prefix, scopes, modifiers, anchor)
        if kind == "type_alias_declaration":
            return [self._type_alias(node, prefix, scopes, modifiers, anchor)]
        if kind in NAMESPACE_NODE_TYPES:
            return [self._namespace(node, prefix, scopes, modifiers, anchor)]
        if kind == "import_alias":
            name = self._text(node.named_children[0]) if node.named_children else None
            return [self._node(NodeKind.OTHER, node, anchor, name=name, modifiers=modifiers)]
        return []

    def _class(self, node, prefix, scopes, modifiers, anchor) -> SourceNode:
        name = self._text(node.child_by_field_name("name"))
        symbol = self._binder.declare(_join(prefix, name))
        mods = set(modifiers)
        if node.type == "abstract_class_declaration":
            mods.add("abstract")
        result = self._node(NodeKind.CLASS, node, anchor, name=name, symbol_id=symbol, modifiers=mods)
        result.type_parameters = self._type_parameters(node.child_by_field_name("type_parameters"), scopes, symbol)
        for child in _named(node):
            if child.type != "class_heritage":
                continue
            for clause in _named(child):
                if clause.type == "extends_clause":
                    result.extends.extend(self._extends_clause(clause, scopes, symbol))
                elif clause.type == "implements_clause":
                    result.implements.extend(self._type(t, scopes, symbol) for t in _named(clause))
        body = node.child_by_field_name("body")
        if body is not None:
            result.children = self._class_members(body, symbol, scopes)
        return result

    def _extends_clause(self, clause: Node, scopes, owner: str) -> List[TypeDescriptor]:
        bases: List[TypeDescriptor] = []
        for child in _named(clause):
            if child.type == "type_arguments" and bases:
                bases[-1].arguments = [self._type(arg, scopes, owner) for arg in _named(child)]
                continue
            bases.append(self._reference(self._text(child), scopes))
        return bases

    def _interface(self, node, prefix, scopes, modifiers, anchor) -> SourceNode:
        name = self._text(node.child_by_field_name("name"))
        symbol = self._binder.declare(_join(prefix, name))
        result = self._node(NodeKind.INTERFACE, node, anchor, name=name, symbol_id=symbol, modifiers=modifiers)
        result.type_parameters = self._type_parameters(node.child_by_field_name("type_parameters"), scopes, symbol)
        for child in _named(node):
            if child.type == "extends_type_clause":
                result.extends.extend(self._type(t, scopes, symbol) for t in _named(child))
        body = node.child_by_field_name("body")
        if body is not None:
            result.children = self._object_members(body, symbol, scopes)
        return result

    def _function(self, node, prefix, scopes, modifiers, anchor) -> SourceNode:
        name = self._text(node.child_by_field_name("name"))
        symbol = self._binder.declare(_join(prefix, name))
        result = self._node(NodeKind.FUNCTION, node, anchor, name=name, symbol_id=symbol, modifiers=modifiers)
        result.signature = self._signature(node, scopes, symbol)
        return result

    def _enum(self, node, prefix, modifiers, anchor) -> SourceNode:
        name = self._text(node.child_by_field_name("name"))
        symbol = self._binder.declare(_join(prefix, name))
        mods = set(modifiers)
        if node.children and node.children[0].type == "const":
            mods.add("const")
        result = self._node(NodeKind.ENUM, node, anchor, name=name, symbol_id=symbol, modifiers=mods)
        body = node.child_by_field_name("body")
        for member in _named(body) if body is not None else []:
            value = None
            name_node = member
            if member.type == "enum_assignment":
                name_node = member.child_by_field_name("name")
                value = self._text(member.child_by_field_name("value"))
            member_name = _strip_quotes(self._text(name_node))
            result.children.append(
                self._node(
                    NodeKind.ENUM_MEMBER,
                    member,
                    member,
                    name=member_name,
                    symbol_id=self._binder.declare(f"{symbol}.{member_name}"),
                    default_value=value,
                )
            )
        return result

    def _variables(self, node, prefix, scopes, modifiers, anchor) -> List[SourceNode]:
        mods = set(modifiers)
        kind_node = node.child_by_field_name("kind")
        if (kind_node is not None and self._text(kind_node) == "const") or (
            node.children and node.children[0].type == "const"
        ):
            mods.add("const")
        result: List[SourceNode] = []
        for declarator in _named(node):
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            name = self._text(name_node)
            symbol = self._binder.declare(_join(prefix, name))
            annotation = declarator.child_by_field_name("type")
            value = declarator.child_by_field_name("value")
            if annotation is None and value is not None and value.type in FUNCTION_VALUE_TYPES:
                function = self._node(NodeKind.FUNCTION, declarator, anchor, name=name, symbol_id=symbol, modifiers=mods)
                function.signature = self._signature(value, scopes, symbol)
                result.append(function)
                continue
            variable = self._node(NodeKind.VARIABLE, declarator, anchor, name=name, symbol_id=symbol, modifiers=mods)
            variable.type = self._annotation(annotation, scopes, symbol)
            variable.default_value = self._text(value) if value is not None else None
            result.append(variable)
        return result

    def _type_alias(self, node, prefix, scopes, modifiers, anchor) -> SourceNode:
        name = self._text(node.child_by_field_name("name"))
        symbol = self._binder.declare(_join(prefix, name))
        result = self._node(NodeKind.TYPE_ALIAS, node, anchor, name=name, symbol_id=symbol, modifiers=modifiers)
        result.type_parameters = self._type_parameters(node.child_by_field_name("type_parameters"), scopes, symbol)
        value = node.child_by_field_name("value")
        if value is not None:
            result.type = self._type(value, scopes, symbol)
        return result

    def _namespace(self, node, prefix, scopes, modifiers, anchor) -> SourceNode:
        name_node = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        if name_node is not None and name_node.type == "string":
            # declare module "name" { ... }
            name = f'"{_strip_quotes(self._text(name_node))}"'
            symbol = self._binder.declare(name)
            result = self._node(NodeKind.MODULE, node, anchor, name=name, symbol_id=symbol, modifiers=modifiers)
            if body is not None:
                result.children = self.statements(body, symbol, (symbol, ""))
            return result

        parts = self._text(name_node).split(".") if name_node is not None else []
        outermost: Optional[SourceNode] = None
        current: Optional[SourceNode] = None
        for part in parts:
            prefix = self._binder.declare(_join(prefix, part))
            scopes = (prefix, *scopes)
            namespace = self._node(
                NodeKind.NAMESPACE,
                node,
                anchor,
                name=part,
                symbol_id=prefix,
                modifiers=modifiers if current is None else {"export"},
            )
            if current is None:
                outermost = namespace
            else:
                namespace.comment = None
                current.children.append(namespace)
            current = namespace
        if current is None:
            return self._node(NodeKind.NAMESPACE, node, anchor, modifiers=modifiers)
        if body is not None:
            current.children.extend(self.statements(body, prefix, scopes))
        return outermost

    def _note_import(self, node: Node) -> None:
        source = node.child_by_field_name("source")
        if source is None:
            return
        target = self._import_target(_strip_quotes(self._text(source)))
        for clause in _named(node):
            if clause.type != "import_clause":
                continue
            for item in _named(clause):
                if item.type == "namespace_import":
                    identifiers = [c for c in _named(item) if c.type == "identifier"]
                    if identifiers:
                        self._imports[self._text(identifiers[-1])] = target
                elif item.type == "named_imports":
                    for specifier in _named(item):
                        if specifier.type != "import_specifier":
                            continue
                        imported = self._text(specifier.child_by_field_name("name"))
                        alias = specifier.child_by_field_name("alias")
                        local = self._text(alias) if alias is not None else imported
                        self._imports[local] = _join(target, imported)

    def _import_target(self, specifier: str) -> str:
        if not self._modules_mode:
            return ""
        if specifier.startswith("."):
            base = posixpath.dirname(_module_path(self._file_name))
            specifier = posixpath.normpath(posixpath.join(base, _module_path(specifier)))
        return f'"{specifier}"'

    # --- members ---
    def _class_members(self, body: Node, owner: str, scopes) -> List[SourceNode]:
        members: List[SourceNode] = []
        for member in _named(body):
            kind = member.type
            if kind in ("method_definition", "method_signature", "abstract_method_signature"):
                members.append(self._method(member, owner, scopes))
            elif kind == "public_field_definition":
                members.append(self._property(member, owner, scopes, value_field="value"))
            elif kind == "index_signature":
                members.append(self._index_signature(member, owner, scopes))
        return _without_overload_implementations(members)

    def _object_members(self, body: Node, owner: str, scopes) -> List[SourceNode]:
        members: List[SourceNode] = []
        for member in _named(body):
            kind = member.type
            if kind == "property_signature":
                members.append(self._property(member, owner, scopes))
            elif kind == "method_signature":
                members.append(self._method(member, owner, scopes))
            elif kind == "call_signature":
                node = self._node(NodeKind.CALL_SIGNATURE, member, member)
                node.signature = self._signature(member, scopes, owner)
                members.append(node)
            elif kind == "construct_signature":
                node = self._node(NodeKind.CONSTRUCT_SIGNATURE, member, member)
                node.signature = self._signature(member, scopes, owner, return_field="type")
                members.append(node)
            elif kind == "index_signature":
                members.append(self._index_signature(member, owner, scopes))
        return members

    def _method(self, member: Node, owner: str, scopes) -> SourceNode:
        name = _strip_quotes(self._text(member.child_by_field_name("name")))
        modifiers = self._modifiers(member)
        if member.type == "abstract_method_signature":
            modifiers.add("abstract")
        kind = NodeKind.METHOD
        tokens = {child.type for child in member.children if not child.is_named}
        if "get" in tokens:
            kind = NodeKind.GET_ACCESSOR
        elif "set" in tokens:
            kind = NodeKind.SET_ACCESSOR
        elif name == "constructor" and member.type == "method_definition":
            kind = NodeKind.CONSTRUCTOR
        symbol = self._binder.declare(_member_symbol(owner, name, modifiers))
        node = self._node(kind, member, member, name=name, symbol_id=symbol, modifiers=modifiers)
        node.signature = self._signature(member, scopes, symbol)
        return node

    def _property(self, member: Node, owner: str, scopes, value_field: Optional[str] = None) -> SourceNode:
        name = _strip_quotes(self._text(member.child_by_field_name("name")))
        modifiers = self._modifiers(member)
        symbol = self._binder.declare(_member_symbol(owner, name, modifiers))
        node = self._node(NodeKind.PROPERTY, member, member, name=name, symbol_id=symbol, modifiers=modifiers)
        node.type = self._annotation(member.child_by_field_name("type"), scopes, symbol)
        if value_field is not None:
            value = member.child_by_field_name(value_field)
            if value is not None:
                node.default_value = self._text(value)
        return node

    def _index_signature(self, member: Node, owner: str, scopes) -> SourceNode:
        node = self._node(NodeKind.INDEX_SIGNATURE, member, member, modifiers=self._modifiers(member))
        parameters: List[ParameterDescriptor] = []
        name = member.child_by_field_name("name")
        if name is None:
            name = next((c for c in _named(member) if c.type == "identifier"), None)
        index_type = member.child_by_field_name("index_type")
        if name is not None:
            parameters.append(
                ParameterDescriptor(
                    name=self._text(name),
                    type=self._type(index_type, scopes, owner) if index_type is not None else None,
                )
            )
        node.signature = SignatureDescriptor(
            parameters=parameters,
            return_type=self._annotation(member.child_by_field_name("type"), scopes, owner),
        )
        return node

    def _modifiers(self, member: Node) -> Set[str]:
        modifiers: Set[str] = set()
        for child in member.children:
            if child.type == "accessibility_modifier":
                modifiers.add(self._text(child))
            elif child.type == "override_modifier":
                modifiers.add("override")
            elif not child.is_named and child.type in MODIFIER_TOKENS:
                modifiers.add(child.type)
            elif not child.is_named and child.type == "?":
                modifiers.add("optional")
        return modifiers

    # --- signatures ---
    def _signature(self, node: Node, scopes, owner: str, return_field: str = "return_type") -> SignatureDescriptor:
        return SignatureDescriptor(
            parameters=self._parameters(
                node.child_by_field_name("parameters") or node.child_by_field_name("parameter"), scopes, owner
            ),
            return_type=self._annotation(node.child_by_field_name(return_field), scopes, owner),
            type_parameters=self._type_parameters(node.child_by_field_name("type_parameters"), scopes, owner),
        )

    def _parameters(self, node: Optional[Node], scopes, owner: str) -> List[ParameterDescriptor]:
        if node is None:
            return []
        if node.type == "identifier":
            # x => ... in an arrow function
            return [ParameterDescriptor(name=self._text(node))]
        parameters: List[ParameterDescriptor] = []
        for parameter in _named(node):
            if parameter.type not in ("required_parameter", "optional_parameter"):
                continue
            pattern = parameter.child_by_field_name("pattern")
            if pattern is None or pattern.type == "this":
                continue
            rest = pattern.type == "rest_pattern"
            if rest:
                inner = _named(pattern)
                name = self._text(inner[0]) if inner else "args"
            elif pattern.type in ("object_pattern", "array_pattern"):
                name = "__namedParameters"
            else:
                name = self._text(pattern)
            value = parameter.child_by_field_name("value")
            parameters.append(
                ParameterDescriptor(
                    name=name,
                    type=self._annotation(parameter.child_by_field_name("type"), scopes, owner),
                    optional=parameter.type == "optional_parameter",
                    rest=rest,
                    default_value=self._text(value) if value is not None else None,
                )
            )
        return parameters

    def _type_parameters(self, node: Optional[Node], scopes, owner: str) -> List[TypeParameterDescriptor]:
        if node is None:
            return []
        parameters: List[TypeParameterDescriptor] = []
        for parameter in _named(node):
            if parameter.type != "type_parameter":
                continue
            constraint = parameter.child_by_field_name("constraint")
            default = parameter.child_by_field_name("value")
            parameters.append(
                TypeParameterDescriptor(
                    name=self._text(parameter.child_by_field_name("name")),
                    constraint=self._annotation(constraint, scopes, owner),
                    default=self._annotation(default, scopes, owner),
                )
            )
        return parameters

    # --- types ---
    def _annotation(self, node: Optional[Node], scopes, owner: str) -> Optional[TypeDescriptor]:
        """Unwrap ``: T``, ``extends T`` and ``= T`` wrappers around a type node."""
        if node is None:
            return None
        if node.type in ("type_annotation", "constraint", "default_type", "omitting_type_annotation"):
            inner = _named(node)
            return self._type(inner[0], scopes, owner) if inner else None
        if node.type in ("asserts_annotation", "type_predicate_annotation"):
            return TypeDescriptor.intrinsic("boolean")
        return self._type(node, scopes, owner)

    def _type(self, node: Node, scopes, owner: str) -> TypeDescriptor:
        kind = node.type
        if kind == "predefined_type":
            return TypeDescriptor.intrinsic(self._text(node))
        if kind in ("type_identifier", "nested_type_identifier", "identifier"):
            return self._reference(self._text(node), scopes)
        if kind == "generic_type":
            reference = self._reference(self._text(node.child_by_field_name("name")), scopes)
            arguments = node.child_by_field_name("type_arguments")
            if arguments is not None:
                reference.arguments = [self._type(arg, scopes, owner) for arg in _named(arguments)]
            return reference
        if kind == "union_type":
            return TypeDescriptor.union(*[self._type(t, scopes, owner) for t in _flatten(node, kind)])
        if kind == "intersection_type":
            return TypeDescriptor.intersection(*[self._type(t, scopes, owner) for t in _flatten(node, kind)])
        if kind == "array_type":
            inner = _named(node)
            if inner:
                return TypeDescriptor.array(self._type(inner[0], scopes, owner))
        if kind == "tuple_type":
            return TypeDescriptor.tuple(*[self._tuple_member(m, scopes, owner) for m in _named(node)])
        if kind in ("parenthesized_type", "readonly_type"):
            inner = _named(node)
            if inner:
                return self._type(inner[0], scopes, owner)
        if kind == "literal_type":
            return self._literal(node)
        if kind == "this_type":
            return TypeDescriptor.intrinsic("this")
        if kind in ("object_type", "interface_body"):
            base = self._binder.declare(f"{owner}:__type@{node.start_byte}")
            return TypeDescriptor.object(self._object_members(node, base, scopes))
        if kind == "function_type":
            return TypeDescriptor.function(self._signature(node, scopes, owner))
        return TypeDescriptor.unknown(self._text(node))

    def _tuple_member(self, node: Node, scopes, owner: str) -> TypeDescriptor:
        if node.type in ("optional_type", "rest_type"):
            inner = _named(node)
            if inner:
                return self._type(inner[0], scopes, owner)
        if node.type in ("tuple_parameter", "optional_tuple_parameter"):
            return self._annotation(node.child_by_field_name("type"), scopes, owner) or TypeDescriptor.unknown(
                self._text(node)
            )
        return self._type(node, scopes, owner)

    def _literal(self, node: Node) -> TypeDescriptor:
        inner = _named(node)
        if inner and inner[0].type == "string":
            return TypeDescriptor.string_literal(_strip_quotes(self._text(inner[0])))
        text = self._text(node)
        if text in ("null", "undefined"):
            return TypeDescriptor.intrinsic(text)
        return TypeDescriptor.unknown(text)

    def _reference(self, name: str, scopes: Tuple[str, ...]) -> TypeDescriptor:
        descriptor = TypeDescriptor.reference(name)
        self._binder.defer(descriptor, tuple(scopes), self._imports)
        return descriptor

    # --- comments and text ---
    def module_comment(self, root: Node) -> Optional[Comment]:
        for child in _named(root, keep_comments=True):
            if child.type != "comment":
                break
            comment = parse_comment(self._text(child))
            if comment is not None and any(comment.has_tag(tag) for tag in MODULE_COMMENT_TAGS):
                return comment
        return None

    def _doc_comment(self, anchor: Node) -> Optional[Comment]:
        sibling = anchor.prev_named_sibling
        if sibling is None or sibling.type != "comment":
            return None
        text = self._text(sibling)
        if not text.startswith("/**"):
            return None
        comment = parse_comment(text)
        if comment is not None and any(comment.has_tag(tag) for tag in MODULE_COMMENT_TAGS):
            return None
        return comment

    def _node(self, kind: NodeKind, node: Node, anchor: Node, **values) -> SourceNode:
        return SourceNode(
            kind=kind,
            comment=self._doc_comment(anchor),
            file=self._file_name,
            line=node.start_point[0] + 1,
            raw_kind=node.type,
            **values,
        )

    def _text(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return self._source[node.start_byte : node.end_byte].decode("utf-8")


def discover_sources(paths: Iterable[Path]) -> List[Path]:
    """Expand directories into the TypeScript files below them, in a stable order."""
    found: List[Path] = []
    seen: Set[Path] = set()
    for entry in paths:
        entry = Path(entry)
        if entry.is_dir():
            candidates = sorted(p for p in entry.rglob("*") if p.is_file() and p.name.endswith(SOURCE_SUFFIXES))
        elif entry.exists():
            candidates = [entry]
        else:
            raise FrontEndError.read_error(str(entry), "no such file or directory")
        for candidate in candidates:
            if "node_modules" in candidate.parts:
                continue
            resolved = candidate.resolve()
            if resolved not in seen:
                seen.add(resolved)
                found.append(resolved)
    return found


def _common_root(files: Sequence[Path]) -> Path:
    if len(files) == 1:
        return files[0].parent
    return Path(os.path.commonpath([str(f.parent) for f in files]))


def _display_name(path: Path, base: Path) -> str:
    try:
        return path.resolve().relative_to(base.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def _module_path(file_name: str) -> str:
    for suffix in DECLARATION_SUFFIXES + SOURCE_SUFFIXES:
        if file_name.endswith(suffix):
            return file_name[: -len(suffix)]
    return file_name


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _member_symbol(owner: str, name: str, modifiers: Set[str]) -> str:
    separator = "." if "static" in modifiers else "#"
    return f"{owner}{separator}{name}"


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        return text[1:-1]
    return text


def _named(node: Node, keep_comments: bool = False) -> List[Node]:
    return [child for child in node.named_children if keep_comments or child.type != "comment"]


def _flatten(node: Node, kind: str) -> List[Node]:
    members: List[Node] = []
    for child in _named(node):
        if child.type == kind:
            members.extend(_flatten(child, kind))
        else:
            members.append(child)
    return members


def _without_overload_implementations(nodes: List[SourceNode]) -> List[SourceNode]:
    signature_only: Set[str] = set()
    kept: List[SourceNode] = []
    for node in nodes:
        if node.raw_kind in SIGNATURE_ONLY_KINDS and node.symbol_id:
            signature_only.add(node.symbol_id)
        elif node.raw_kind in IMPLEMENTATION_KINDS and node.symbol_id in signature_only:
            continue
        kept.append(node)
    return kept


# --- inherited members ---


def _inherit_members(files: Sequence[SourceFile]) -> int:
    """Copy into each class and interface the base members it does not redeclare.

    Runs after binding, since bases are found through the bound symbols of
    ``extends`` clauses. Bases are completed first, so a member reaches down
    a whole chain and each copy points at the member of its direct base.
    Partial declarations of one symbol share a member set; the copies go to
    the first of them. Returns the number of copied members.
    """
    groups: Dict[str, List[SourceNode]] = {}
    for node in _class_like_nodes(node for source in files for node in source.nodes):
        groups.setdefault(node.symbol_id, []).append(node)

    done: Set[str] = set()
    active: Set[str] = set()
    copied = 0

    def complete(symbol: str) -> None:
        nonlocal copied
        if symbol in done or symbol in active:
            return
        active.add(symbol)
        group = groups[symbol]
        own = {_member_key(member) for node in group for member in node.children}
        bases: List[str] = []
        for base in (item for node in group for item in node.extends):
            if base.symbol_id in groups and base.symbol_id != symbol and base.symbol_id not in bases:
                bases.append(base.symbol_id)

        claimed: Dict[Tuple[Optional[str], bool], str] = {}
        inherited: List[SourceNode] = []
        for base_symbol in bases:
            complete(base_symbol)
            for member in (m for node in groups[base_symbol] for m in node.children):
                key = _member_key(member)
                if member.kind not in INHERITED_MEMBER_KINDS or key in own:
                    continue
                if claimed.setdefault(key, base_symbol) != base_symbol:
                    continue
                inherited.append(_inherited_copy(member, symbol))
        group[0].children.extend(inherited)
        copied += len(inherited)
        active.discard(symbol)
        done.add(symbol)

    for symbol in groups:
        complete(symbol)
    return copied


def _class_like_nodes(nodes: Iterable[SourceNode]) -> Iterator[SourceNode]:
    for node in nodes:
        if node.kind in (NodeKind.CLASS, NodeKind.INTERFACE) and node.symbol_id:
            yield node
        yield from _class_like_nodes(node.children)


def _member_key(member: SourceNode) -> Tuple[Optional[str], bool]:
    return member.name, "static" in member.modifiers


def _inherited_copy(member: SourceNode, owner: str) -> SourceNode:
    copy = deepcopy(member)
    symbol = _member_symbol(owner, member.name or "", member.modifiers)
    if member.symbol_id:
        _rebase_literals(copy, member.symbol_id, symbol)
    copy.symbol_id = symbol
    copy.origin_symbol = member.symbol_id
    return copy


def _rebase_literals(node: SourceNode, old: str, new: str) -> None:
    """Move type-literal members hanging off ``old`` under ``new``."""
    for descriptor in _node_descriptors(node):
        for member in descriptor.members:
            if member.symbol_id and member.symbol_id.startswith(old + ":"):
                member.symbol_id = new + member.symbol_id[len(old):]
            _rebase_literals(member, old, new)


def _node_descriptors(node: SourceNode) -> Iterator[TypeDescriptor]:
    roots: List[Optional[TypeDescriptor]] = [node.type, *node.extends, *node.implements]
    roots.extend(_signature_descriptors(node.signature))
    for parameter in node.type_parameters:
        roots.extend((parameter.constraint, parameter.default))
    for root in roots:
        if root is not None:
            yield from _walk_descriptor(root)


def _signature_descriptors(signature: Optional[SignatureDescriptor]) -> List[Optional[TypeDescriptor]]:
    if signature is None:
        return []
    roots = [parameter.type for parameter in signature.parameters]
    roots.append(signature.return_type)
    for parameter in signature.type_parameters:
        roots.extend((parameter.constraint, parameter.default))
    return roots


def _walk_descriptor(descriptor: TypeDescriptor) -> Iterator[TypeDescriptor]:
    yield descriptor
    for argument in descriptor.arguments:
        yield from _walk_descriptor(argument)
    for nested in _signature_descriptors(descriptor.signature):
        if nested is not None:
            yield from _walk_descriptor(nested)
