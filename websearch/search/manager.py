"""
SearchEngineManager 구현

- 검색 엔진별 어댑터 등록 및 조회
- 검색 URL 구성과 결과 페이지 파싱을 엔진에 맞게 위임
"""

import logging
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from websearch.errors import ValidationError
from websearch.models.data_models import DateRange, SearchEngine, SearchResult
from websearch.search.adapters import (
    BingAdapter,
    DuckDuckGoAdapter,
    GoogleAdapter,
    SearchAdapter,
    build_query,
)


logger = logging.getLogger(__name__)


class SearchEngineManager:
    """다중 검색 엔진 관리자

    - 엔진 이름으로 어댑터를 찾아 통일된 인터페이스 제공
    - 기본으로 DuckDuckGo, Google, Bing 어댑터 등록
    """

    def __init__(self, register_defaults: bool = True):
        """SearchEngineManager 초기화

        Args:
            register_defaults: 기본 어댑터 등록 여부
        """
        self._adapters: Dict[SearchEngine, SearchAdapter] = {}
        if register_defaults:
            self._register_default_adapters()

    def _register_default_adapters(self) -> None:
        self.register_adapter(DuckDuckGoAdapter())
        self.register_adapter(GoogleAdapter())
        self.register_adapter(BingAdapter())

    def register_adapter(self, adapter: SearchAdapter) -> None:
        """검색 어댑터 등록 (같은 엔진이면 교체)

        Args:
            adapter: 등록할 검색 어댑터
        """
        self._adapters[adapter.engine] = adapter
        logger.debug(f"검색 어댑터 등록: {adapter.name}")

    def get_adapter(self, engine: SearchEngine) -> SearchAdapter:
        """엔진에 맞는 어댑터 반환

        Raises:
            ValidationError: 등록된 어댑터가 없는 경우
        """
        adapter = self._adapters.get(engine)
        if adapter is None:
            raise ValidationError(f"등록된 검색 어댑터가 없습니다: {engine.value}")
        return adapter

    def get_adapters(self) -> List[SearchAdapter]:
        """등록된 어댑터 목록 반환"""
        return list(self._adapters.values())

    def get_supported_engines(self) -> List[SearchEngine]:
        return list(self._adapters.keys())

    def build_search_url(
        self,
        engine: SearchEngine,
        query: str,
        site_filter: Optional[str] = None,
        file_type: Optional[str] = None,
        date_range: Optional[DateRange] = None
    ) -> str:
        """검색 연산자와 엔진별 파라미터를 반영한 검색 URL

        Args:
            engine: 검색 엔진
            query: 검색어
            site_filter: 도메인 제한
            file_type: 파일 형식 제한
            date_range: 기간 필터 (지원하는 엔진만 반영)

        Returns:
            검색 결과 페이지 URL
        """
        adapter = self.get_adapter(engine)
        return adapter.build_search_url(build_query(query, site_filter, file_type), date_range)

    def parse_results(
        self,
        engine: SearchEngine,
        soup: BeautifulSoup,
        page_url: str = "",
        max_results: int = 10
    ) -> List[SearchResult]:
        """렌더링된 검색 결과 페이지 파싱

        Args:
            engine: 검색 엔진
            soup: 렌더링된 페이지 DOM
            page_url: 페이지 URL (상대 링크 해석용)
            max_results: 처리할 최대 결과 수

        Returns:
            문서 순서의 검색 결과 목록
        """
        return self.get_adapter(engine).parse(soup, page_url, max_results)
