from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence

from .nodes import SourceFile


class FrontEnd(ABC):
    language: str

    @abstractmethod
    def read(self, paths: Sequence[Path], root: Path | None = None) -> List[SourceFile]:
        """Return one SourceFile per input, with symbol identities bound across all of them."""


class FrontEndRegistry:
    def __init__(self) -> None:
        self._registry: dict[str, FrontEnd] = {}

    def register(self, front_end: FrontEnd) -> None:
        self._registry[front_end.language] = front_end

    def get(self, language: str) -> FrontEnd:
        try:
            return self._registry[language]
        except KeyError as exc:
            raise ValueError(f"No front end registered for {language}") from exc
