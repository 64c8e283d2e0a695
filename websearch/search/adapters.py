"""
Search Adapter 구현

- SearchAdapter: 검색 엔진별 전략 추상 클래스
  (검색 URL 구성, 결과 컨테이너/제목/snippet 선택자, URL 추출 방식)
- DuckDuckGoAdapter: DuckDuckGo HTML 버전
- GoogleAdapter: Google 검색
- BingAdapter: Bing 검색
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import parse_qs, quote, urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from websearch.models.data_models import DateRange, SearchEngine, SearchResult


logger = logging.getLogger(__name__)


def build_query(query: str, site_filter: Optional[str] = None, file_type: Optional[str] = None) -> str:
    """검색 연산자를 붙인 쿼리 구성

    Args:
        query: 검색어
        site_filter: 도메인 제한 (예: github.com)
        file_type: 파일 형식 제한 (예: pdf)

    Returns:
        "query site:... filetype:..." 형태의 쿼리
    """
    enhanced = query
    if site_filter:
        enhanced += f" site:{site_filter}"
    if file_type:
        enhanced += f" filetype:{file_type}"
    return enhanced


def encode_query(query: str) -> str:
    """JavaScript encodeURIComponent와 같은 규칙으로 퍼센트 인코딩"""
    return quote(query, safe="!~*'()")


def _element_text(element: Optional[Tag]) -> str:
    """요소의 텍스트 (앞뒤 공백 제거)"""
    if element is None:
        return ""
    return element.get_text().strip()


class SearchAdapter(ABC):
    """검색 어댑터 추상 클래스

    - 다양한 검색 엔진을 통일된 인터페이스로 제공
    - 렌더링된 검색 결과 페이지를 문서 순서대로 SearchResult 목록으로 변환
    """

    search_url_prefix: str = ""
    result_container_selector: str = ""
    title_selector: str = ""
    snippet_selector: str = ""

    @property
    @abstractmethod
    def engine(self) -> SearchEngine:
        """어댑터가 담당하는 검색 엔진"""
        pass

    @property
    def name(self) -> str:
        return self.engine.value

    def build_search_url(self, query: str, date_range: Optional[DateRange] = None) -> str:
        """검색 URL 구성

        기본 구현은 기간 필터를 지원하지 않는다.

        Args:
            query: 검색어 (연산자 포함)
            date_range: 기간 필터

        Returns:
            검색 결과 페이지 URL
        """
        if date_range is not None:
            logger.debug(f"{self.name}: 기간 필터 미지원, 무시됨 ({date_range.value})")
        return f"{self.search_url_prefix}{encode_query(query)}"

    @abstractmethod
    def _extract_url(self, container: Tag, title_element: Tag, base_url: str) -> Optional[str]:
        """결과 컨테이너에서 대상 URL 추출

        Args:
            container: 결과 컨테이너 요소
            title_element: 제목 요소
            base_url: 상대 링크 해석 기준 URL

        Returns:
            절대 URL 또는 None
        """
        pass

    def extract_record(self, container: Tag, base_url: str = "") -> Optional[SearchResult]:
        """결과 컨테이너 하나를 SearchResult로 변환

        제목이나 URL이 없으면 None (부분 레코드는 만들지 않음).
        """
        title_element = container.select_one(self.title_selector)
        if title_element is None:
            return None

        title = _element_text(title_element)
        url = self._extract_url(container, title_element, base_url)
        if not title or not url:
            return None

        snippet = _element_text(container.select_one(self.snippet_selector))
        return SearchResult(url=url, title=title, snippet=snippet)

    def parse(self, soup: BeautifulSoup, base_url: str = "", max_results: int = 10) -> List[SearchResult]:
        """검색 결과 페이지 파싱

        문서 순서대로 최대 max_results개의 컨테이너만 처리하고,
        제목이나 URL이 없는 컨테이너는 건너뛴다.

        Args:
            soup: 렌더링된 검색 결과 페이지
            base_url: 페이지 URL
            max_results: 처리할 최대 컨테이너 수

        Returns:
            검색 결과 목록 (max_results개 이하)
        """
        containers = soup.select(self.result_container_selector)[:max_results]

        results: List[SearchResult] = []
        for container in containers:
            record = self.extract_record(container, base_url)
            if record is None:
                logger.debug(f"{self.name}: 제목 또는 URL 없는 결과 건너뜀")
                continue
            results.append(record)

        logger.info(f"{self.name} 결과 파싱: 컨테이너 {len(containers)}개 → 결과 {len(results)}개")
        return results

    def _resolve_href(self, element: Optional[Tag], base_url: str) -> Optional[str]:
        """앵커 href를 절대 URL로 변환"""
        if element is None:
            return None
        href = (element.get("href") or "").strip()
        if not href:
            return None
        return urljoin(base_url, href) if base_url else href


class DuckDuckGoAdapter(SearchAdapter):
    """DuckDuckGo HTML 버전 어댑터

    - URL은 제목 앵커의 href
    - /l/?uddg= 리다이렉트 링크는 실제 대상 URL로 변환
    """

    search_url_prefix = "https://duckduckgo.com/html/?q="
    result_container_selector = ".result"
    title_selector = ".result__title a"
    snippet_selector = ".result__snippet"

    @property
    def engine(self) -> SearchEngine:
        return SearchEngine.DUCKDUCKGO

    def _extract_url(self, container: Tag, title_element: Tag, base_url: str) -> Optional[str]:
        url = self._resolve_href(title_element, base_url or "https://duckduckgo.com/")
        if not url:
            return None
        parsed = urlparse(url)
        if parsed.netloc.endswith("duckduckgo.com") and parsed.path.startswith("/l/"):
            target = parse_qs(parsed.query).get("uddg")
            if target and target[0]:
                return target[0]
        return url


class GoogleAdapter(SearchAdapter):
    """Google 검색 어댑터

    - URL은 컨테이너 안의 첫 번째 a[href]
    - 기간 필터는 tbs=qdr:<d|w|m|y> 파라미터로 지원
    - /url?q= 리다이렉트 링크는 실제 대상 URL로 변환
    """

    search_url_prefix = "https://www.google.com/search?q="
    result_container_selector = ".g"
    title_selector = "h3"
    snippet_selector = ".VwiC3b"

    DATE_RANGE_CODES = {
        DateRange.DAY: "d",
        DateRange.WEEK: "w",
        DateRange.MONTH: "m",
        DateRange.YEAR: "y",
    }

    @property
    def engine(self) -> SearchEngine:
        return SearchEngine.GOOGLE

    def build_search_url(self, query: str, date_range: Optional[DateRange] = None) -> str:
        url = f"{self.search_url_prefix}{encode_query(query)}"
        if date_range is not None:
            url += f"&tbs=qdr:{self.DATE_RANGE_CODES[date_range]}"
        return url

    def _extract_url(self, container: Tag, title_element: Tag, base_url: str) -> Optional[str]:
        link = container.select_one("a[href]")
        url = self._resolve_href(link, base_url or "https://www.google.com/")
        if not url:
            return None
        parsed = urlparse(url)
        if parsed.netloc.endswith("google.com") and parsed.path == "/url":
            target = parse_qs(parsed.query).get("q")
            if target and target[0]:
                return target[0]
        return url


class BingAdapter(SearchAdapter):
    """Bing 검색 어댑터

    - 제목 요소(h2 a) 자체가 앵커이며 URL은 그 href
    """

    search_url_prefix = "https://www.bing.com/search?q="
    result_container_selector = ".b_algo"
    title_selector = "h2 a"
    snippet_selector = ".b_caption p"

    @property
    def engine(self) -> SearchEngine:
        return SearchEngine.BING

    def _extract_url(self, container: Tag, title_element: Tag, base_url: str) -> Optional[str]:
        return self._resolve_href(title_element, base_url or "https://www.bing.com/")
