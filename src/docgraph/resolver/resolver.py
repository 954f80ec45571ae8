"""Close the documentation graph after conversion.

The resolver runs once, after every file has been converted. It binds
reference types to their target declarations, records who extends and
implements whom, links members to the base members they overwrite,
inherit or implement, linearizes type hierarchies and fills in inherited
comments. References whose symbol was never converted stay unresolved.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

import structlog

from ..core.errors import Diagnostic, ErrorCode, ResolverError
from ..models.comments import Comment
from ..models.kinds import ReflectionFlag, ReflectionKind
from ..models.reflections import (
    DeclarationReflection,
    ProjectReflection,
    Reflection,
    SignatureReflection,
)
from ..models.types import ReferenceType, Type, iter_references
from .links import DeclarationHierarchy, DeclarationLinks, ResolvedProject

log = structlog.get_logger()

INHERIT_DOC_TAG = "inheritdoc"


def resolve_project(project: ProjectReflection) -> ResolvedProject:
    """Run the resolver pass over a fully converted project."""
    return ReferenceResolver(project).resolve()


class ReferenceResolver:
    def __init__(self, project: ProjectReflection) -> None:
        self.project = project
        self.links: Dict[int, DeclarationLinks] = {}
        self.unresolved: List[ReferenceType] = []
        self.diagnostics: List[Diagnostic] = []
        self._comments_done: Set[int] = set()
        self._comments_active: Set[int] = set()

    # --- public API ---
    def resolve(self) -> ResolvedProject:
        if self.project.resolved:
            raise ResolverError.already_resolved(self.project.name)

        self._resolve_references()
        declarations = list(self.project.declarations())
        for declaration in declarations:
            self._link_reverse_edges(declaration)
        for declaration in declarations:
            if declaration.kind & ReflectionKind.ClassOrInterface:
                self._link_members(declaration)
        for declaration in declarations:
            self._build_hierarchy(declaration)
        for declaration in declarations:
            self._comment_for(declaration)

        self.project.resolved = True
        log.info(
            "resolver.done",
            reflections=len(self.project.registry),
            unresolved=len(self.unresolved),
        )
        return ResolvedProject(
            project=self.project,
            links=self.links,
            unresolved=self.unresolved,
            diagnostics=self.diagnostics,
        )

    # --- references ---
    def _resolve_references(self) -> None:
        registry = self.project.registry
        for reflection in registry:
            for reference in iter_references(reflection.own_types()):
                if reference.is_resolved:
                    continue
                target = registry.lookup_symbol(reference.symbol_id)
                if target is None:
                    self.unresolved.append(reference)
                    self.diagnostics.append(
                        Diagnostic(
                            code=ErrorCode.UNRESOLVED_REFERENCE,
                            message=f"cannot resolve '{reference.name}' in {reflection}",
                            details={"symbol": reference.symbol_id, "owner": reflection.id},
                        )
                    )
                    log.debug(
                        "resolver.unresolved_reference",
                        name=reference.name,
                        symbol=reference.symbol_id,
                        owner=reflection.id,
                    )
                    continue
                reference.target_id = target.id

    def _target(self, item: Optional[Type]) -> Optional[DeclarationReflection]:
        if not isinstance(item, ReferenceType) or not item.is_resolved:
            return None
        target = self.project.get(item.target_id)
        if isinstance(target, DeclarationReflection):
            return target
        return None

    def _links(self, declaration: Reflection) -> DeclarationLinks:
        links = self.links.get(declaration.id)
        if links is None:
            links = self.links[declaration.id] = DeclarationLinks()
        return links

    # --- reverse edges ---
    def _link_reverse_edges(self, declaration: DeclarationReflection) -> None:
        for item in declaration.extended_types:
            target = self._target(item)
            if target is not None and target is not declaration:
                self._links(target).extended_by.append(_reference_to(declaration))
        for item in declaration.implemented_types:
            target = self._target(item)
            if target is not None and target is not declaration:
                self._links(target).implemented_by.append(_reference_to(declaration))

    def _ancestors(self, declaration: DeclarationReflection) -> List[DeclarationReflection]:
        """Base declarations reachable through ``extended_types``, nearest first."""
        seen = {declaration.id}
        ordered: List[DeclarationReflection] = []
        frontier = [declaration]
        while frontier:
            next_frontier: List[DeclarationReflection] = []
            for item in frontier:
                for base_type in item.extended_types:
                    base = self._target(base_type)
                    if base is None or base.id in seen:
                        continue
                    seen.add(base.id)
                    ordered.append(base)
                    next_frontier.append(base)
            frontier = next_frontier
        return ordered

    def _implemented_interfaces(
        self,
        declaration: DeclarationReflection,
        ancestors: Iterable[DeclarationReflection],
    ) -> List[DeclarationReflection]:
        seen: Set[int] = set()
        interfaces: List[DeclarationReflection] = []
        for owner in [declaration, *ancestors]:
            for item in owner.implemented_types:
                target = self._target(item)
                if target is None:
                    continue
                for candidate in [target, *self._ancestors(target)]:
                    if candidate.id in seen:
                        continue
                    seen.add(candidate.id)
                    interfaces.append(candidate)
        return interfaces

    # --- member links ---
    def _link_members(self, declaration: DeclarationReflection) -> None:
        ancestors = self._ancestors(declaration)
        interfaces: List[DeclarationReflection] = []
        if declaration.kind == ReflectionKind.Class:
            interfaces = self._implemented_interfaces(declaration, ancestors)
        if not ancestors and not interfaces:
            return

        registry = self.project.registry
        for member in declaration.get_children(self.project):
            if not isinstance(member, DeclarationReflection):
                continue
            origin = registry.lookup_symbol(member.origin_symbol)
            if (
                isinstance(origin, DeclarationReflection)
                and origin is not member
                and origin.parent_id != declaration.id
            ):
                self._links(member).inherited_from = self._member_reference(origin)
            else:
                overwritten = self._find_member(ancestors, member)
                if overwritten is not None:
                    self._links(member).overwrites = self._member_reference(overwritten)
            if interfaces and not member.has_flag(ReflectionFlag.Static):
                implemented = self._find_member(interfaces, member)
                if implemented is not None:
                    self._links(member).implementation_of = self._member_reference(implemented)

    def _find_member(
        self,
        owners: Iterable[DeclarationReflection],
        member: DeclarationReflection,
    ) -> Optional[DeclarationReflection]:
        is_static = member.has_flag(ReflectionFlag.Static)
        for owner in owners:
            candidate = owner.get_child_by_name(self.project, [member.name])
            if (
                isinstance(candidate, DeclarationReflection)
                and candidate.has_flag(ReflectionFlag.Static) == is_static
            ):
                return candidate
        return None

    def _member_reference(self, member: DeclarationReflection) -> ReferenceType:
        owner = self.project.get(member.parent_id)
        name = f"{owner.name}.{member.name}" if owner is not None else member.name
        return ReferenceType(name=name, symbol_id=member.symbol_id, target_id=member.id)

    # --- hierarchy ---
    def _build_hierarchy(self, declaration: DeclarationReflection) -> None:
        if not declaration.kind & ReflectionKind.ClassOrInterface:
            return
        existing = self.links.get(declaration.id)
        extended_by = list(existing.extended_by) if existing is not None else []
        if not declaration.extended_types and not extended_by:
            return

        levels: List[List[Type]] = []
        visited = {declaration.id}
        current = [declaration]
        while current:
            level_types: List[Type] = []
            next_current: List[DeclarationReflection] = []
            for item in current:
                for base_type in item.extended_types:
                    level_types.append(base_type)
                    base = self._target(base_type)
                    if base is not None and base.id not in visited:
                        visited.add(base.id)
                        next_current.append(base)
            if not level_types:
                break
            levels.append(level_types)
            current = next_current

        root: Optional[DeclarationHierarchy] = None
        tail: Optional[DeclarationHierarchy] = None

        def push(types: List[Type], is_target: bool = False) -> None:
            nonlocal root, tail
            level = DeclarationHierarchy(types=types, is_target=is_target)
            if tail is None:
                root = level
            else:
                tail.next = level
            tail = level

        for types in reversed(levels):
            push(types)
        push([_reference_to(declaration)], is_target=True)
        if extended_by:
            push(extended_by)
        self._links(declaration).type_hierarchy = root

    # --- comments ---
    def _comment_for(self, reflection: DeclarationReflection) -> Optional[Comment]:
        rid = reflection.id
        if rid in self._comments_done or rid in self._comments_active:
            return reflection.comment
        self._comments_active.add(rid)
        try:
            source = self._comment_source(reflection)
            if source is not None:
                inherited = self._comment_for(source)
                if inherited is not None:
                    reflection.comment = _merge_comment(inherited, reflection.comment)
                self._inherit_signature_comments(reflection, source)
        finally:
            self._comments_active.discard(rid)
            self._comments_done.add(rid)
        return reflection.comment

    def _comment_source(self, reflection: DeclarationReflection) -> Optional[DeclarationReflection]:
        comment = reflection.comment
        tag = comment.get_tag(INHERIT_DOC_TAG) if comment is not None else None
        if tag is None and comment is not None and not comment.is_empty():
            return None
        if tag is not None and tag.text:
            target = self._find_named(reflection, tag.text)
            if target is not None:
                return target
            log.debug("resolver.inheritdoc_target_missing", owner=reflection.id, target=tag.text)
        links = self.links.get(reflection.id)
        if links is None:
            return None
        for reference in (links.implementation_of, links.overwrites, links.inherited_from):
            target = self._target(reference)
            if target is not None:
                return target
        return None

    def _find_named(self, reflection: DeclarationReflection, text: str) -> Optional[DeclarationReflection]:
        names = [part for part in text.strip("{} ").split(".") if part]
        if not names:
            return None
        start = self.project.get(reflection.parent_id)
        if isinstance(start, DeclarationReflection):
            found = start.find_reflection_by_name(self.project, names, search_up=True)
        else:
            found = self.project.find_by_name(names)
        if isinstance(found, DeclarationReflection) and found is not reflection:
            return found
        return None

    def _inherit_signature_comments(
        self,
        reflection: DeclarationReflection,
        source: DeclarationReflection,
    ) -> None:
        pairs = list(zip(reflection.signatures, source.signatures))
        for slot in ("get_signature", "set_signature"):
            mine, theirs = getattr(reflection, slot), getattr(source, slot)
            if mine is not None and theirs is not None:
                pairs.append((mine, theirs))
        for mine_id, theirs_id in pairs:
            mine = self.project.get(mine_id)
            theirs = self.project.get(theirs_id)
            if not isinstance(mine, SignatureReflection) or not isinstance(theirs, SignatureReflection):
                continue
            if theirs.comment is None:
                continue
            if mine.comment is None or mine.comment.has_tag(INHERIT_DOC_TAG):
                mine.comment = _merge_comment(theirs.comment, mine.comment)


def _reference_to(declaration: DeclarationReflection) -> ReferenceType:
    return ReferenceType(name=declaration.name, symbol_id=declaration.symbol_id, target_id=declaration.id)


def _merge_comment(inherited: Comment, local: Optional[Comment]) -> Comment:
    merged = inherited.copy()
    merged.remove_tags(INHERIT_DOC_TAG)
    if local is not None:
        for tag in local.tags:
            if tag.tag_name == INHERIT_DOC_TAG:
                continue
            if merged.get_tag(tag.tag_name, tag.param_name) is None:
                merged.tags.append(tag)
    return merged
