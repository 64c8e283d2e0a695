"""
URL 중복 제거 유틸리티

- 한 페이지에 같은 URL이 여러 번 나오면 첫 번째 결과만 유지
- 원본에 있던 모든 고유 URL이 결과에 포함
"""

from typing import List
from urllib.parse import urlparse, urlunparse

from websearch.models.data_models import SearchResult


def normalize_url(url: str) -> str:
    """URL을 비교 가능한 형태로 정규화

    스킴과 호스트는 소문자로, 후행 슬래시와 프래그먼트는 제거한다.
    경로와 쿼리는 대소문자를 유지한다.

    Args:
        url: 정규화할 URL

    Returns:
        정규화된 URL 문자열
    """
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return url.strip()

    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        parsed.path.rstrip('/'),
        parsed.params,
        parsed.query,
        ''  # 프래그먼트 제거
    ))


def deduplicate_search_results(results: List[SearchResult]) -> List[SearchResult]:
    """SearchResult 목록에서 URL 기준으로 중복 제거

    Args:
        results: SearchResult 객체 목록

    Returns:
        중복이 제거된 SearchResult 목록 (원본 순서 유지)
    """
    seen = set()
    unique = []

    for result in results:
        normalized = normalize_url(result.url)
        if normalized not in seen:
            seen.add(normalized)
            unique.append(result)

    return unique
