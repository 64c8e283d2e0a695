# Search Engine Module
"""
검색 엔진 모듈
- SearchAdapter: 검색 어댑터 추상 클래스
- DuckDuckGoAdapter / GoogleAdapter / BingAdapter: 엔진별 어댑터
- SearchEngineManager: 다중 검색 엔진 관리
"""

from websearch.search.adapters import (
    SearchAdapter,
    DuckDuckGoAdapter,
    GoogleAdapter,
    BingAdapter,
    build_query,
    encode_query
)
from websearch.search.manager import SearchEngineManager

__all__ = [
    "SearchAdapter",
    "DuckDuckGoAdapter",
    "GoogleAdapter",
    "BingAdapter",
    "build_query",
    "encode_query",
    "SearchEngineManager"
]
