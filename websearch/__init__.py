# Web Search Cache Package
"""
캐시 기반 웹 검색 패키지
- DuckDuckGo / Google / Bing 검색 결과 파싱
- 페이지 콘텐츠 추출 (text, links, images)
- SQLite 검색/콘텐츠 캐시
"""

__version__ = "0.1.0"

from websearch.orchestrator import WebSearchOrchestrator, SearchOutcome, ExtractionOutcome, ExportOutcome
from websearch.models.config import SearchConfig
from websearch.models.data_models import SearchResult, SearchResultRecord, ContentBundle, BulkSearchEntry
from websearch.search.manager import SearchEngineManager
from websearch.storage.cache import SearchCache
from websearch.storage.database import CacheDatabase
from websearch.errors import WebSearchError, RenderError, ParseError, StorageError, ValidationError

__all__ = [
    "WebSearchOrchestrator",
    "SearchOutcome",
    "ExtractionOutcome",
    "ExportOutcome",
    "SearchConfig",
    "SearchResult",
    "SearchResultRecord",
    "ContentBundle",
    "BulkSearchEntry",
    "SearchEngineManager",
    "SearchCache",
    "CacheDatabase",
    "WebSearchError",
    "RenderError",
    "ParseError",
    "StorageError",
    "ValidationError",
]
