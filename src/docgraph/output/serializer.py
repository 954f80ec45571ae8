"""JSON-ready view of a resolved project.

Keys are camelCase and a key is left out when its slot is empty, so the
output of a small project stays small. Inline type literals are not
children of anything; they are expanded where a ``reflection`` type
points at them.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..models.kinds import flags_to_dict, kind_string
from ..models.reflections import (
    ContainerReflection,
    DeclarationReflection,
    ParameterReflection,
    ProjectReflection,
    Reflection,
    SignatureReflection,
    TypeParameterReflection,
)
from ..models.types import Type
from ..resolver.links import ResolvedProject

OutlineRow = Tuple[str, str, int]


def serialize_project(resolved: ResolvedProject) -> Dict[str, Any]:
    return serialize_reflection(resolved, resolved.project)


def serialize_reflection(resolved: ResolvedProject, reflection: Reflection) -> Dict[str, Any]:
    project = resolved.project

    def expand(rid: int) -> Dict[str, Any]:
        return serialize_reflection(resolved, project.registry[rid])

    def dump_type(item: Optional[Type]) -> Optional[Dict[str, Any]]:
        return item.to_dict(expand) if item is not None else None

    def dump_ids(ids: List[int]) -> List[Dict[str, Any]]:
        return [expand(rid) for rid in ids]

    data: Dict[str, Any] = {
        "id": reflection.id,
        "name": reflection.name,
        "kind": int(reflection.kind),
        "kindString": kind_string(reflection.kind),
        "flags": flags_to_dict(reflection.flags),
    }
    if reflection.comment is not None and not reflection.comment.is_empty():
        data["comment"] = reflection.comment.to_dict()

    if isinstance(reflection, DeclarationReflection):
        _put(data, "type", dump_type(reflection.type))
        _put(data, "typeParameters", dump_ids(reflection.type_parameters))
        _put(data, "signatures", dump_ids(reflection.signatures))
        for key, rid in (
            ("indexSignature", reflection.index_signature),
            ("getSignature", reflection.get_signature),
            ("setSignature", reflection.set_signature),
        ):
            if rid is not None:
                data[key] = expand(rid)
        _put(data, "defaultValue", reflection.default_value)
        _put(data, "extendedTypes", [t.to_dict(expand) for t in reflection.extended_types])
        _put(data, "implementedTypes", [t.to_dict(expand) for t in reflection.implemented_types])
        links = resolved.links.get(reflection.id)
        if links is not None:
            _put(data, "extendedBy", [t.to_dict(expand) for t in links.extended_by])
            _put(data, "implementedBy", [t.to_dict(expand) for t in links.implemented_by])
            _put(data, "inheritedFrom", dump_type(links.inherited_from))
            _put(data, "overwrites", dump_type(links.overwrites))
            _put(data, "implementationOf", dump_type(links.implementation_of))
            if links.type_hierarchy is not None:
                data["typeHierarchy"] = links.type_hierarchy.to_dict(expand)
        _put(data, "sources", [source.to_dict() for source in reflection.sources])
    elif isinstance(reflection, SignatureReflection):
        _put(data, "typeParameters", dump_ids(reflection.type_parameters))
        _put(data, "parameters", dump_ids(reflection.parameters))
        _put(data, "type", dump_type(reflection.type))
    elif isinstance(reflection, ParameterReflection):
        _put(data, "type", dump_type(reflection.type))
        _put(data, "defaultValue", reflection.default_value)
    elif isinstance(reflection, TypeParameterReflection):
        _put(data, "type", dump_type(reflection.constraint))
        _put(data, "default", dump_type(reflection.default))

    if isinstance(reflection, ContainerReflection):
        _put(data, "children", dump_ids(reflection.children))
    return data


def _put(data: Dict[str, Any], key: str, value: Any) -> None:
    if value is None or value == [] or value == {}:
        return
    data[key] = value


def write_json(data: Any, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


def outline(data: Dict[str, Any]) -> List[OutlineRow]:
    """``(path, kindString, signature count)`` for every child in serialized output."""
    rows: List[OutlineRow] = []

    def visit(node: Dict[str, Any], prefix: str) -> None:
        for child in node.get("children", []):
            path = f"{prefix}.{child['name']}" if prefix else child["name"]
            rows.append((path, child["kindString"], len(child.get("signatures", []))))
            visit(child, path)

    visit(data, "")
    return rows


def outline_project(resolved: ResolvedProject) -> List[OutlineRow]:
    """The same rows as ``outline``, read from the graph itself."""
    project: ProjectReflection = resolved.project
    rows: List[OutlineRow] = []

    def visit(container: ContainerReflection, prefix: str) -> None:
        for child in container.get_children(project):
            path = f"{prefix}.{child.name}" if prefix else child.name
            signatures = len(child.signatures) if isinstance(child, DeclarationReflection) else 0
            rows.append((path, kind_string(child.kind), signatures))
            if isinstance(child, ContainerReflection):
                visit(child, path)

    visit(project, "")
    return rows
