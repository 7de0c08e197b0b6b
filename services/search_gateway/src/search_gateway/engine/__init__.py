from search_gateway.engine.base import EngineSearchResult, SearchEngine
from search_gateway.engine.meilisearch_client import MeilisearchClient

__all__ = ["EngineSearchResult", "MeilisearchClient", "SearchEngine"]
