from __future__ import annotations

from typing import Any, Dict, List

import structlog

from ..models.kinds import ReflectionFlag, ReflectionKind
from ..models.reflections import DeclarationReflection, Reflection
from ..resolver.links import ResolvedProject

log = structlog.get_logger()


def build_search_index(resolved: ResolvedProject) -> List[Dict[str, Any]]:
    """One row per documented declaration, in id order.

    External declarations and anything nested in an inline type literal
    have no page of their own and are left out.
    """
    project = resolved.project
    rows: List[Dict[str, Any]] = []
    for reflection in project.declarations():
        if reflection.has_flag(ReflectionFlag.External):
            continue
        if _inside_type_literal(resolved, reflection):
            continue
        row: Dict[str, Any] = {
            "id": len(rows),
            "kind": int(reflection.kind),
            "name": reflection.name,
            "fullName": reflection.get_full_name(project),
        }
        parent = project.get(reflection.parent_id)
        if parent is not None and parent.kind != ReflectionKind.Project:
            row["parent"] = parent.get_full_name(project)
        rows.append(row)
    log.debug("search_index.built", rows=len(rows))
    return rows


def _inside_type_literal(resolved: ResolvedProject, reflection: DeclarationReflection) -> bool:
    current: Reflection | None = reflection
    while current is not None:
        if current.kind == ReflectionKind.TypeLiteral:
            return True
        current = resolved.get(current.parent_id)
    return False
