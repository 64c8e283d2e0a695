"""
WebSearchOrchestrator - 검색/추출 프로세스 조율자

- SearchCache, SearchEngineManager, PageRenderer, ContentExtractor 통합
- 캐시 조회 → 렌더링 → 파싱 → 캐시 저장 워크플로우 관리
- 일괄 검색, 캐시 정리, 통계, 내보내기 지원
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, List, Optional
from urllib.parse import urlparse

from websearch.errors import ValidationError, WebSearchError
from websearch.exporters.exporters import ExporterFactory
from websearch.extractors.content_extractor import ContentExtractor
from websearch.models.config import SearchConfig
from websearch.models.data_models import (
    BulkSearchEntry,
    ClearCacheResult,
    DateRange,
    ExtractKind,
    ExtractedContentRecord,
    SearchAnalytics,
    SearchEngine,
    SearchResult,
    SearchResultRecord,
)
from websearch.rendering import PageRenderer, create_renderer
from websearch.search.manager import SearchEngineManager
from websearch.storage.cache import SearchCache, utc_now
from websearch.storage.database import CacheDatabase
from websearch.utils.url_deduplicator import deduplicate_search_results


logger = logging.getLogger(__name__)


@dataclass
class SearchOutcome:
    """검색 결과와 캐시 히트 여부"""
    records: List[SearchResultRecord] = field(default_factory=list)
    from_cache: bool = False

    @property
    def count(self) -> int:
        return len(self.records)


@dataclass
class ExtractionOutcome:
    """콘텐츠 추출 결과와 캐시 히트 여부"""
    record: ExtractedContentRecord
    from_cache: bool = False


@dataclass
class ExportOutcome:
    """내보내기 결과

    - data: 직렬화된 문자열 (JSON 또는 CSV)
    - filename: 권장 파일명 (search_export_YYYY-MM-DD.<ext>)
    """
    format: str
    record_count: int
    data: str
    filename: str


def _require_text(name: str, value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{name}은(는) 비어 있을 수 없습니다")
    return value


def _require_positive(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValidationError(f"{name}은(는) 0보다 커야 합니다: {value!r}")


def _require_count(name: str, value) -> None:
    """결과 개수는 양의 정수만 허용 (bool 제외)"""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{name}은(는) 양의 정수여야 합니다: {value!r}")


def _optional_text(value: Optional[str]) -> Optional[str]:
    """빈 문자열 필터는 None으로 취급"""
    if value is None:
        return None
    value = value.strip()
    return value or None


class WebSearchOrchestrator:
    """웹 검색 프로세스 조율자

    - 렌더러 사용은 인스턴스별 Lock으로 직렬화 (동시에 하나의 렌더링만 수행)
    - 렌더링 실패와 캐시 저장 실패는 호출자에게 그대로 전파
    """

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        renderer: Optional[PageRenderer] = None,
        database: Optional[CacheDatabase] = None,
        search_engine: Optional[SearchEngineManager] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """WebSearchOrchestrator 초기화

        Args:
            config: 검색 설정. None이면 기본값 사용
            renderer: 페이지 렌더러. None이면 설정에 따라 생성
            database: 캐시 DB. None이면 config.db_path로 생성
            search_engine: 검색 엔진 관리자. None이면 기본 어댑터로 생성
            clock: 현재 UTC 시각 함수 (테스트용)
        """
        self.config = config or SearchConfig()
        self.renderer = renderer or create_renderer(self.config)

        self.database = database or CacheDatabase(self.config.db_path)
        if not self.database.is_open:
            try:
                self.database.open()
            except Exception:
                self.renderer.close()
                raise

        self.cache = SearchCache(self.database, self.config, clock=clock)
        self.search_engine = search_engine or SearchEngineManager()
        self.content_extractor = ContentExtractor()
        self._clock = clock or utc_now
        self._render_lock = threading.Lock()

        logger.info(f"WebSearchOrchestrator 초기화 완료 (renderer={self.renderer.name}, db={self.database.path})")

    # ------------------------------------------------------------------
    # 검색
    # ------------------------------------------------------------------

    def search(
        self,
        query: str,
        max_results: int = 10,
        engine="duckduckgo",
        site_filter: Optional[str] = None,
        file_type: Optional[str] = None,
        date_range=None,
        use_cache: bool = True
    ) -> List[SearchResultRecord]:
        """웹 검색 수행

        Args:
            query: 검색어
            max_results: 최대 결과 수
            engine: 검색 엔진 (이름 또는 SearchEngine)
            site_filter: 도메인 제한
            file_type: 파일 형식 제한
            date_range: 기간 필터 (day/week/month/year)
            use_cache: False면 캐시 조회를 건너뜀 (저장은 수행)

        Returns:
            검색 결과 레코드 목록

        Raises:
            ValidationError: 입력 값이 잘못된 경우
            RenderError: 검색 페이지 렌더링 실패
            StorageError: 캐시 읽기/쓰기 실패
        """
        return self.search_detailed(
            query, max_results, engine, site_filter, file_type, date_range, use_cache
        ).records

    def search_detailed(
        self,
        query: str,
        max_results: int = 10,
        engine="duckduckgo",
        site_filter: Optional[str] = None,
        file_type: Optional[str] = None,
        date_range=None,
        use_cache: bool = True
    ) -> SearchOutcome:
        """search()와 같지만 캐시 히트 여부를 함께 반환"""
        query = _require_text("query", query)
        _require_count("max_results", max_results)
        engine = SearchEngine.parse(engine)
        date_range = DateRange.parse_optional(date_range)
        site_filter = _optional_text(site_filter)
        file_type = _optional_text(file_type)

        if use_cache:
            cached = self.cache.lookup_search_results(
                query, engine, max_results, site_filter, file_type, date_range
            )
            if cached:
                logger.info(f"캐시된 검색 결과 사용: {query!r} ({engine.value}, {len(cached)}개)")
                return SearchOutcome(records=cached, from_cache=True)

        results = self._fetch_search_results(
            query, engine, max_results, site_filter, file_type, date_range
        )
        records = self.cache.upsert_search_results(
            query, results, engine, site_filter, file_type, date_range
        )
        logger.info(f"검색 완료: {query!r} ({engine.value}, {len(records)}개)")
        return SearchOutcome(records=records, from_cache=False)

    def _fetch_search_results(
        self,
        query: str,
        engine: SearchEngine,
        max_results: int,
        site_filter: Optional[str],
        file_type: Optional[str],
        date_range: Optional[DateRange]
    ) -> List[SearchResult]:
        """검색 결과 페이지를 렌더링하고 파싱 (URL 중복 제거 포함)"""
        search_url = self.search_engine.build_search_url(
            engine, query, site_filter, file_type, date_range
        )
        logger.debug(f"검색 페이지 요청: {search_url}")

        with self._render_lock:
            page = self.renderer.render(search_url)
            results = self.renderer.evaluate(
                page,
                lambda soup: self.search_engine.parse_results(engine, soup, page.url, max_results)
            )

        return deduplicate_search_results(results)

    def bulk_search(
        self,
        queries: List[str],
        max_results_per_query: int = 5,
        engine="duckduckgo"
    ) -> List[BulkSearchEntry]:
        """여러 검색어를 순차적으로 검색

        - 캐시 조회 없이 항상 새로 검색하고 결과는 캐시에 저장
        - 한 검색어의 실패는 해당 항목의 error로 기록하고 계속 진행

        Args:
            queries: 검색어 목록
            max_results_per_query: 검색어당 최대 결과 수
            engine: 검색 엔진

        Returns:
            입력 순서와 같은 BulkSearchEntry 목록
        """
        if not queries:
            raise ValidationError("queries는 비어 있을 수 없습니다")
        _require_count("max_results_per_query", max_results_per_query)
        engine = SearchEngine.parse(engine)

        entries: List[BulkSearchEntry] = []
        for index, query in enumerate(queries, 1):
            try:
                outcome = self.search_detailed(
                    query, max_results_per_query, engine, use_cache=False
                )
                entries.append(BulkSearchEntry(query=query, results=outcome.records))
            except WebSearchError as e:
                logger.warning(f"일괄 검색 실패 ({index}/{len(queries)}): {query!r} - {e}")
                entries.append(BulkSearchEntry(query=query, error=str(e)))

        failed = sum(1 for entry in entries if not entry.ok)
        logger.info(f"일괄 검색 완료: {len(entries)}개 검색어, 실패 {failed}개")
        return entries

    # ------------------------------------------------------------------
    # 콘텐츠 추출
    # ------------------------------------------------------------------

    def extract(self, url: str, kind="text") -> ExtractionOutcome:
        """웹 페이지 콘텐츠 추출

        같은 종류(또는 all)로 추출된 캐시가 유효하면 렌더링하지 않는다.
        새로 추출하면 해당 url의 기존 캐시는 종류와 관계없이 대체된다.

        Args:
            url: 대상 페이지 URL (http/https)
            kind: 추출 종류 (text/links/images/all)

        Returns:
            ExtractionOutcome

        Raises:
            ValidationError: url이 비었거나 잘못된 경우
            RenderError: 페이지 렌더링 실패
            StorageError: 캐시 읽기/쓰기 실패
        """
        url = _require_text("url", url).strip()
        if urlparse(url).scheme not in ("http", "https"):
            raise ValidationError(f"http(s) URL이 아닙니다: {url}")
        kind = ExtractKind.parse(kind)

        cached = self.cache.lookup_content(url)
        if cached is not None and cached.content_type.covers(kind):
            logger.info(f"캐시된 콘텐츠 사용: {url} ({cached.content_type.value})")
            if cached.content_type is not kind:
                cached = replace(cached, content=cached.content.restrict(kind), content_type=kind)
            return ExtractionOutcome(record=cached, from_cache=True)

        with self._render_lock:
            page = self.renderer.render(url)
            bundle = self.content_extractor.extract(self.renderer, page, kind)

        record = self.cache.upsert_content(url, bundle, kind, page.title)
        return ExtractionOutcome(record=record, from_cache=False)

    # ------------------------------------------------------------------
    # 캐시 관리 / 통계 / 내보내기
    # ------------------------------------------------------------------

    def clear_cache(
        self,
        older_than_days: Optional[float] = None,
        include_content: bool = False
    ) -> ClearCacheResult:
        """캐시 정리

        Args:
            older_than_days: 이 일수 이상 지난 항목만 삭제. None이면 전체
            include_content: 추출 콘텐츠 캐시도 함께 정리

        Returns:
            ClearCacheResult
        """
        result = ClearCacheResult()
        result.search_results_removed = self.cache.delete_older_than(older_than_days)
        if include_content:
            result.content_removed = self.cache.delete_content_older_than(older_than_days)
        return result

    def search_analytics(self, days_back: float = 30) -> SearchAnalytics:
        """최근 검색 기록 통계"""
        _require_positive("days_back", days_back)
        return self.cache.get_analytics(days_back)

    def export_results(
        self,
        query: Optional[str] = None,
        fmt: str = "json",
        days_back: float = 7
    ) -> ExportOutcome:
        """캐시된 검색 결과 내보내기

        Args:
            query: 특정 검색어만 내보내기. None이면 전체
            fmt: 내보내기 형식 ("json" 또는 "csv")
            days_back: 내보낼 기간 (일)

        Returns:
            ExportOutcome
        """
        exporter = ExporterFactory.create(fmt)
        _require_positive("days_back", days_back)

        records = self.cache.fetch_for_export(_optional_text(query), days_back)
        data = exporter.serialize(records)
        filename = f"search_export_{self._clock().strftime('%Y-%m-%d')}{exporter.get_extension()}"

        logger.info(f"내보내기 완료: {len(records)}개 ({fmt})")
        return ExportOutcome(
            format=exporter.get_extension().lstrip("."),
            record_count=len(records),
            data=data,
            filename=filename
        )

    def close(self) -> None:
        """리소스 정리 (렌더러, DB)"""
        try:
            self.renderer.close()
        finally:
            self.database.close()
        logger.info("WebSearchOrchestrator 종료")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
