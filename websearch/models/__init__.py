# Data Models Package
"""데이터 모델 정의"""

from .data_models import (
    SearchEngine,
    DateRange,
    ExtractKind,
    SearchResult,
    SearchResultRecord,
    LinkItem,
    ImageItem,
    ContentBundle,
    ExtractedContentRecord,
    BulkSearchEntry,
    ClearCacheResult,
    SearchAnalytics
)
from .config import SearchConfig

__all__ = [
    # 입력 열거형
    "SearchEngine",
    "DateRange",
    "ExtractKind",
    # 검색 / 추출 레코드
    "SearchResult",
    "SearchResultRecord",
    "LinkItem",
    "ImageItem",
    "ContentBundle",
    "ExtractedContentRecord",
    "BulkSearchEntry",
    "ClearCacheResult",
    "SearchAnalytics",
    # 설정
    "SearchConfig"
]
