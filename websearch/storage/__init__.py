# Storage Module
"""
캐시 저장소 모듈
- CacheDatabase: SQLite 핸들 및 마이그레이션
- SearchCache: 검색 결과 / 추출 콘텐츠 캐싱
"""

from websearch.storage.database import CacheDatabase, MIGRATIONS, SCHEMA_VERSION
from websearch.storage.cache import SearchCache, format_timestamp, parse_timestamp, utc_now

__all__ = [
    "CacheDatabase",
    "MIGRATIONS",
    "SCHEMA_VERSION",
    "SearchCache",
    "format_timestamp",
    "parse_timestamp",
    "utc_now",
]
