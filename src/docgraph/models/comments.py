"""Doc comments attached to reflections.

Only the structure of a comment is extracted here: a free-text summary and
the ``@tag`` blocks that follow it. Tag text is kept verbatim.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Tags whose first word names the thing they describe.
PARAM_TAGS = {"param", "typeparam", "template", "property", "prop"}

TAG_RE = re.compile(r"^@(?P<tag>[A-Za-z][\w-]*)\s*(?P<rest>.*)$")
INLINE_INHERIT_RE = re.compile(r"\{@inheritDoc(?:\s+(?P<target>[^}]*))?\}", re.IGNORECASE)


@dataclass(slots=True)
class CommentTag:
    tag_name: str
    text: str = ""
    param_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"tag": self.tag_name, "text": self.text}
        if self.param_name:
            data["param"] = self.param_name
        return data


@dataclass(slots=True)
class Comment:
    summary: str = ""
    tags: List[CommentTag] = field(default_factory=list)

    def has_tag(self, tag_name: str) -> bool:
        return self.get_tag(tag_name) is not None

    def get_tag(self, tag_name: str, param_name: Optional[str] = None) -> Optional[CommentTag]:
        wanted = tag_name.lower()
        for tag in self.tags:
            if tag.tag_name != wanted:
                continue
            if param_name is None or tag.param_name == param_name:
                return tag
        return None

    def remove_tags(self, tag_name: str) -> None:
        wanted = tag_name.lower()
        self.tags = [tag for tag in self.tags if tag.tag_name != wanted]

    def is_empty(self) -> bool:
        return not self.summary and not self.tags

    def copy(self) -> Comment:
        return Comment(
            summary=self.summary,
            tags=[CommentTag(t.tag_name, t.text, t.param_name) for t in self.tags],
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.summary:
            data["summary"] = self.summary
        if self.tags:
            data["tags"] = [tag.to_dict() for tag in self.tags]
        return data


def _strip_comment_markers(raw: str) -> List[str]:
    text = raw.strip()
    if text.startswith("/**"):
        text = text[3:]
    elif text.startswith("/*"):
        text = text[2:]
    if text.endswith("*/"):
        text = text[:-2]
    lines = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
            if stripped.startswith(" "):
                stripped = stripped[1:]
        lines.append(stripped.rstrip())
    return lines


def parse_comment(raw: Optional[str]) -> Optional[Comment]:
    """Split a ``/** ... */`` block into a summary and its tags.

    Returns None for empty blocks and for plain ``/* */`` or ``//`` comments.
    An inline ``{@inheritDoc Target}`` is turned into an ``inheritdoc`` tag.
    """
    if not raw or not raw.lstrip().startswith("/**"):
        return None
    summary_lines: List[str] = []
    tags: List[CommentTag] = []
    current: Optional[CommentTag] = None
    for line in _strip_comment_markers(raw):
        match = TAG_RE.match(line)
        if match:
            tag_name = match.group("tag").lower()
            rest = match.group("rest").strip()
            param_name = None
            if tag_name in PARAM_TAGS and rest:
                first, _, remainder = rest.partition(" ")
                param_name = first.strip("[]{}")
                rest = remainder.lstrip("- ").strip()
            current = CommentTag(tag_name=tag_name, text=rest, param_name=param_name)
            tags.append(current)
            continue
        if current is None:
            summary_lines.append(line)
        elif line:
            current.text = f"{current.text}\n{line}" if current.text else line
    summary = "\n".join(summary_lines).strip()
    inline = INLINE_INHERIT_RE.search(summary)
    if inline:
        summary = INLINE_INHERIT_RE.sub("", summary).strip()
        tags.insert(0, CommentTag("inheritdoc", (inline.group("target") or "").strip()))
    comment = Comment(summary=summary, tags=tags)
    if comment.is_empty():
        return None
    return comment
