from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterator, Mapping, Optional

if TYPE_CHECKING:
    from .reflections import Reflection


@dataclass
class IdentityRegistry:
    """
    Hand out reflection ids and remember which reflection owns each symbol.

    Ids are dense, start at ``base`` and follow creation order. They are only
    meaningful inside one run. The symbol map is what lets a second
    declaration of the same entity merge into the first one.
    """

    base: int = 0
    _next_id: int = field(default=-1, init=False)
    _reflections: Dict[int, "Reflection"] = field(default_factory=dict, init=False)
    _symbols: Dict[str, int] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self._next_id = self.base

    def allocate(self, reflection: "Reflection") -> int:
        if reflection.id >= 0:
            raise ValueError(f"reflection {reflection.name!r} already has id {reflection.id}")
        rid = self._next_id
        self._next_id += 1
        reflection.id = rid
        self._reflections[rid] = reflection
        return rid

    def register_symbol(self, symbol_id: str, reflection: "Reflection") -> None:
        if reflection.id not in self._reflections:
            raise ValueError(f"reflection {reflection.name!r} was never allocated")
        self._symbols[symbol_id] = reflection.id

    def lookup_symbol(self, symbol_id: Optional[str]) -> Optional["Reflection"]:
        if symbol_id is None:
            return None
        rid = self._symbols.get(symbol_id)
        if rid is None:
            return None
        return self._reflections[rid]

    def get(self, rid: Optional[int]) -> Optional["Reflection"]:
        if rid is None:
            return None
        return self._reflections.get(rid)

    def __getitem__(self, rid: int) -> "Reflection":
        return self._reflections[rid]

    def __contains__(self, rid: object) -> bool:
        return rid in self._reflections

    def __len__(self) -> int:
        return len(self._reflections)

    def __iter__(self) -> Iterator["Reflection"]:
        return iter(list(self._reflections.values()))

    @property
    def reflections(self) -> Mapping[int, "Reflection"]:
        return MappingProxyType(self._reflections)

    @property
    def symbols(self) -> Mapping[str, int]:
        return MappingProxyType(self._symbols)
