"""
SearchCache 구현

- 검색 결과 / 추출 콘텐츠 캐싱 및 TTL 관리
- 동일 키 재저장 시 기존 행 대체 (INSERT OR REPLACE)
- 기간 기반 캐시 정리, 통계, 내보내기용 조회
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional

from websearch.errors import StorageError, ValidationError
from websearch.models.config import SearchConfig
from websearch.models.data_models import (
    ContentBundle,
    DateRange,
    ExtractKind,
    ExtractedContentRecord,
    SearchAnalytics,
    SearchEngine,
    SearchResult,
    SearchResultRecord,
)
from websearch.storage.database import CacheDatabase


logger = logging.getLogger(__name__)

# SQLite CURRENT_TIMESTAMP와 같은 형식 (UTC)
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_now() -> datetime:
    """초 단위로 자른 현재 UTC 시각 (naive)"""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value[:19], TIMESTAMP_FORMAT)


@contextmanager
def _storage_operation(name: str):
    """sqlite3 에러를 StorageError로 변환"""
    try:
        yield
    except sqlite3.Error as e:
        logger.error(f"캐시 저장소 에러: {name} - {e}")
        raise StorageError(name, e)


class SearchCache:
    """검색 결과 / 추출 콘텐츠 캐시

    - 검색 결과: (query, url) 유일, 기본 TTL 24시간
    - 추출 콘텐츠: url 유일, 기본 TTL 7일
    - 만료된 행은 조회에서 제외될 뿐 자동 삭제되지 않음
    """

    def __init__(
        self,
        database: CacheDatabase,
        config: Optional[SearchConfig] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """SearchCache 초기화

        Args:
            database: 열린 (또는 열릴) CacheDatabase
            config: 설정. None이면 기본값 사용
            clock: 현재 시각 함수 (naive UTC). None이면 utc_now
        """
        if config is None:
            config = SearchConfig()

        self._db = database
        self._clock = clock or utc_now
        self.search_ttl = timedelta(hours=config.search_cache_ttl_hours)
        self.content_ttl = timedelta(days=config.content_cache_ttl_days)

    def _now(self) -> datetime:
        return self._clock().replace(microsecond=0)

    @property
    def _conn(self) -> sqlite3.Connection:
        return self._db.connection

    # ------------------------------------------------------------------
    # 검색 결과
    # ------------------------------------------------------------------

    def lookup_search_results(
        self,
        query: str,
        engine: SearchEngine,
        limit: int,
        site_filter: Optional[str] = None,
        file_type: Optional[str] = None,
        date_range: Optional[DateRange] = None
    ) -> List[SearchResultRecord]:
        """캐시된 검색 결과 반환

        - (query, engine)과 필터가 일치하고 TTL 이내인 행
        - 최신순, 같은 시각이면 저장 순서
        - 빈 목록은 캐시 미스 (만료와 미검색을 구분하지 않음)

        Args:
            query: 검색어
            engine: 검색 엔진
            limit: 최대 결과 수
            site_filter: 사이트 필터
            file_type: 파일 형식 필터
            date_range: 기간 필터

        Returns:
            캐시된 검색 결과 목록
        """
        cutoff = format_timestamp(self._now() - self.search_ttl)

        with _storage_operation("lookup_search_results"):
            rows = self._conn.execute(
                """
                SELECT * FROM search_results
                WHERE query = ? AND search_engine = ?
                  AND site_filter IS ? AND file_type IS ? AND date_range IS ?
                  AND timestamp > ?
                ORDER BY timestamp DESC, id ASC
                LIMIT ?
                """,
                (
                    query,
                    engine.value,
                    site_filter,
                    file_type,
                    date_range.value if date_range else None,
                    cutoff,
                    limit,
                ),
            ).fetchall()

        records = [self._row_to_search_record(row) for row in rows]
        if records:
            logger.debug(f"캐시 히트: query={query!r}, engine={engine.value}, count={len(records)}")
        else:
            logger.debug(f"캐시 미스: query={query!r}, engine={engine.value}")
        return records

    def upsert_search_results(
        self,
        query: str,
        results: Iterable[SearchResult],
        engine: SearchEngine,
        site_filter: Optional[str] = None,
        file_type: Optional[str] = None,
        date_range: Optional[DateRange] = None
    ) -> List[SearchResultRecord]:
        """검색 결과 캐싱

        - 같은 (query, url) 행은 통째로 대체 (제목, snippet, 시각 모두 갱신)

        Returns:
            저장된 레코드 목록 (입력 순서)
        """
        now = self._now()
        records = [
            SearchResultRecord(
                query=query,
                url=result.url,
                title=result.title,
                snippet=result.snippet,
                search_engine=engine,
                created_at=now,
                site_filter=site_filter,
                file_type=file_type,
                date_range=date_range
            )
            for result in results
        ]
        if not records:
            return records

        params = [
            (
                r.query,
                r.url,
                r.title,
                r.snippet,
                format_timestamp(r.created_at),
                r.search_engine.value,
                r.site_filter,
                r.file_type,
                r.date_range.value if r.date_range else None,
            )
            for r in records
        ]

        with _storage_operation("upsert_search_results"), self._conn:
            self._conn.executemany(
                """
                INSERT OR REPLACE INTO search_results
                    (query, url, title, snippet, timestamp, search_engine, site_filter, file_type, date_range)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                params,
            )

        logger.debug(f"캐시 저장: query={query!r}, engine={engine.value}, count={len(records)}")
        return records

    def delete_older_than(self, days: Optional[float] = None) -> int:
        """검색 결과 캐시 정리

        Args:
            days: 이 일수 이상 지난 행 삭제. None이면 전체 삭제

        Returns:
            삭제된 행 수
        """
        return self._delete_from("search_results", days)

    # ------------------------------------------------------------------
    # 추출 콘텐츠
    # ------------------------------------------------------------------

    def lookup_content(self, url: str) -> Optional[ExtractedContentRecord]:
        """캐시된 추출 콘텐츠 반환 (TTL 이내인 경우만)"""
        cutoff = format_timestamp(self._now() - self.content_ttl)

        with _storage_operation("lookup_content"):
            row = self._conn.execute(
                """
                SELECT url, content, content_type, title, timestamp FROM extracted_content
                WHERE url = ? AND timestamp > ?
                """,
                (url, cutoff),
            ).fetchone()

        if row is None:
            logger.debug(f"콘텐츠 캐시 미스: {url}")
            return None

        try:
            bundle = ContentBundle.from_json(row["content"])
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise StorageError("lookup_content", e)

        logger.debug(f"콘텐츠 캐시 히트: {url} ({row['content_type']})")
        return ExtractedContentRecord(
            url=row["url"],
            content=bundle,
            content_type=ExtractKind.parse(row["content_type"] or "text"),
            title=row["title"] or "",
            created_at=parse_timestamp(row["timestamp"])
        )

    def upsert_content(
        self,
        url: str,
        bundle: ContentBundle,
        content_type: ExtractKind,
        title: str
    ) -> ExtractedContentRecord:
        """추출 콘텐츠 캐싱

        - 같은 url의 기존 묶음은 종류와 관계없이 통째로 대체

        Returns:
            저장된 레코드
        """
        record = ExtractedContentRecord(
            url=url,
            content=bundle,
            content_type=content_type,
            title=title,
            created_at=self._now()
        )

        with _storage_operation("upsert_content"), self._conn:
            self._conn.execute(
                """
                INSERT OR REPLACE INTO extracted_content (url, content, content_type, title, timestamp)
                VALUES (?, ?, ?, ?, ?)
                """,
                (url, bundle.to_json(), content_type.value, title, format_timestamp(record.created_at)),
            )

        logger.debug(f"콘텐츠 캐시 저장: {url} ({content_type.value})")
        return record

    def delete_content_older_than(self, days: Optional[float] = None) -> int:
        """추출 콘텐츠 캐시 정리

        Args:
            days: 이 일수 이상 지난 행 삭제. None이면 전체 삭제

        Returns:
            삭제된 행 수
        """
        return self._delete_from("extracted_content", days)

    # ------------------------------------------------------------------
    # 통계 / 내보내기
    # ------------------------------------------------------------------

    def get_analytics(self, days_back: float = 30) -> SearchAnalytics:
        """검색 기록 통계

        Args:
            days_back: 집계 기간 (일)

        Returns:
            SearchAnalytics
        """
        cutoff = format_timestamp(self._now() - timedelta(days=days_back))
        analytics = SearchAnalytics(days_back=days_back)

        with _storage_operation("get_analytics"):
            totals = self._conn.execute(
                """
                SELECT COUNT(*) AS total_results, COUNT(DISTINCT query) AS unique_queries
                FROM search_results WHERE timestamp > ?
                """,
                (cutoff,),
            ).fetchone()
            engine_rows = self._conn.execute(
                """
                SELECT COALESCE(search_engine, 'duckduckgo') AS engine, COUNT(*) AS count
                FROM search_results WHERE timestamp > ?
                GROUP BY engine ORDER BY count DESC, engine ASC
                """,
                (cutoff,),
            ).fetchall()
            query_rows = self._conn.execute(
                """
                SELECT query, COUNT(*) AS count
                FROM search_results WHERE timestamp > ?
                GROUP BY query ORDER BY count DESC, query ASC
                LIMIT 10
                """,
                (cutoff,),
            ).fetchall()

        analytics.total_results = totals["total_results"]
        analytics.unique_queries = totals["unique_queries"]
        analytics.engine_counts = {row["engine"]: row["count"] for row in engine_rows}
        analytics.top_queries = [(row["query"], row["count"]) for row in query_rows]
        return analytics

    def fetch_for_export(
        self,
        query: Optional[str] = None,
        days_back: float = 7
    ) -> List[SearchResultRecord]:
        """내보내기용 검색 결과 조회 (최신순)

        Args:
            query: 특정 검색어만 조회. None이면 전체
            days_back: 조회 기간 (일)
        """
        cutoff = format_timestamp(self._now() - timedelta(days=days_back))
        sql = "SELECT * FROM search_results WHERE timestamp > ?"
        params: list = [cutoff]
        if query:
            sql += " AND query = ?"
            params.append(query)
        sql += " ORDER BY timestamp DESC, id ASC"

        with _storage_operation("fetch_for_export"):
            rows = self._conn.execute(sql, params).fetchall()
        return [self._row_to_search_record(row) for row in rows]

    # ------------------------------------------------------------------

    def _delete_from(self, table: str, days: Optional[float]) -> int:
        """기간 기반 삭제 공통 로직"""
        if days is not None and days < 0:
            raise ValidationError(f"days는 0 이상이어야 합니다: {days}")

        with _storage_operation(f"delete:{table}"), self._conn:
            if days is None:
                cursor = self._conn.execute(f"DELETE FROM {table}")
            else:
                cutoff = format_timestamp(self._now() - timedelta(days=days))
                cursor = self._conn.execute(
                    f"DELETE FROM {table} WHERE timestamp <= ?", (cutoff,)
                )

        count = cursor.rowcount
        scope = "전체" if days is None else f"{days}일 이상"
        logger.info(f"캐시 정리: {table} {scope} {count}개 삭제")
        return count

    def _row_to_search_record(self, row: sqlite3.Row) -> SearchResultRecord:
        """DB 행을 SearchResultRecord로 변환"""
        return SearchResultRecord(
            query=row["query"],
            url=row["url"],
            title=row["title"] or "",
            snippet=row["snippet"] or "",
            search_engine=SearchEngine.parse(row["search_engine"] or "duckduckgo"),
            created_at=parse_timestamp(row["timestamp"]),
            site_filter=row["site_filter"],
            file_type=row["file_type"],
            date_range=DateRange.parse_optional(row["date_range"])
        )
