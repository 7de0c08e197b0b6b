"""Search engine abstraction - the gateway only needs search and health."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class EngineSearchResult:
    hits: list[dict[str, Any]] = field(default_factory=list)
    estimated_total_hits: int | None = None
    processing_time_ms: int = 0


class SearchEngine(ABC):
    """Full-text search engine holding the tenant and global product indexes."""

    @abstractmethod
    async def search(
        self, index_name: str, query: str, limit: int = 20, offset: int = 0
    ) -> EngineSearchResult:
        """Search one index. Raises SearchEngineError on any failure."""
        ...

    @abstractmethod
    async def health(self) -> dict[str, Any]:
        """Engine-reported health payload. Raises SearchEngineError when unreachable."""
        ...

    async def aclose(self) -> None:
        """Release connections held by the engine handle."""
        return None
