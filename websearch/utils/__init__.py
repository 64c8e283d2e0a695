# Utilities Package
"""유틸리티 함수"""

from websearch.utils.url_deduplicator import deduplicate_search_results, normalize_url

__all__ = [
    "deduplicate_search_results",
    "normalize_url",
]
