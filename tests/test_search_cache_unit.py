"""
Unit Tests for SearchCache

- 검색 결과 저장 / 조회 / TTL 경계
- (query, url) 재저장 시 대체
- 추출 콘텐츠 대체 및 TTL 경계
- 기간 기반 정리, 통계, 내보내기 조회
- sqlite 에러의 StorageError 변환
"""

from datetime import timedelta

import pytest

from websearch.errors import StorageError, ValidationError
from websearch.models.data_models import (
    ContentBundle,
    DateRange,
    ExtractKind,
    LinkItem,
    SearchEngine,
    SearchResult,
)


DDG = SearchEngine.DUCKDUCKGO


def _results(*names):
    return [
        SearchResult(url=f"https://example.com/{name}", title=name.title(), snippet=f"{name} snippet")
        for name in names
    ]


def _count(cache, table):
    return cache._conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


class TestSearchResultCache:
    """검색 결과 캐시 테스트"""

    def test_lookup_returns_written_records(self, cache):
        """저장 직후 조회하면 저장된 레코드와 동일"""
        written = cache.upsert_search_results("python", _results("a", "b", "c"), DDG)

        cached = cache.lookup_search_results("python", DDG, 10)

        assert cached == written
        assert [r.url for r in cached] == [
            "https://example.com/a", "https://example.com/b", "https://example.com/c",
        ]

    def test_lookup_respects_limit(self, cache):
        cache.upsert_search_results("python", _results("a", "b", "c"), DDG)
        assert len(cache.lookup_search_results("python", DDG, 2)) == 2

    def test_lookup_miss_on_unknown_query(self, cache):
        cache.upsert_search_results("python", _results("a"), DDG)
        assert cache.lookup_search_results("rust", DDG, 10) == []

    def test_lookup_miss_on_other_engine(self, cache):
        cache.upsert_search_results("python", _results("a"), DDG)
        assert cache.lookup_search_results("python", SearchEngine.BING, 10) == []

    def test_lookup_matches_filters(self, cache):
        """필터가 다르면 캐시 미스, 같으면 히트"""
        cache.upsert_search_results(
            "python", _results("a"), SearchEngine.GOOGLE,
            site_filter="python.org", date_range=DateRange.WEEK
        )

        assert cache.lookup_search_results("python", SearchEngine.GOOGLE, 10) == []
        assert cache.lookup_search_results(
            "python", SearchEngine.GOOGLE, 10, site_filter="python.org"
        ) == []

        hits = cache.lookup_search_results(
            "python", SearchEngine.GOOGLE, 10, site_filter="python.org", date_range=DateRange.WEEK
        )
        assert len(hits) == 1
        assert hits[0].date_range is DateRange.WEEK

    def test_upsert_same_query_url_replaces_row(self, cache, clock):
        """같은 (query, url)은 한 행만 남고 두 번째 저장 값이 유지"""
        cache.upsert_search_results("python", [SearchResult("https://example.com/a", "First", "one")], DDG)
        clock.advance(minutes=5)
        cache.upsert_search_results("python", [SearchResult("https://example.com/a", "Second", "two")], DDG)

        cached = cache.lookup_search_results("python", DDG, 10)

        assert _count(cache, "search_results") == 1
        assert cached[0].title == "Second"
        assert cached[0].snippet == "two"
        assert cached[0].created_at == clock.now

    def test_same_url_under_different_queries_is_kept(self, cache):
        cache.upsert_search_results("python", _results("a"), DDG)
        cache.upsert_search_results("snake", _results("a"), DDG)

        assert _count(cache, "search_results") == 2

    def test_newest_rows_first(self, cache, clock):
        cache.upsert_search_results("python", _results("old"), DDG)
        clock.advance(hours=1)
        cache.upsert_search_results("python", _results("new"), DDG)

        cached = cache.lookup_search_results("python", DDG, 10)

        assert [r.url for r in cached] == ["https://example.com/new", "https://example.com/old"]

    def test_upsert_empty_results_writes_nothing(self, cache):
        assert cache.upsert_search_results("python", [], DDG) == []
        assert _count(cache, "search_results") == 0

    def test_freshness_boundary_just_inside_window(self, cache, clock):
        """24시간에서 1초 모자라면 히트"""
        cache.upsert_search_results("python", _results("a"), DDG)
        clock.advance(hours=24, seconds=-1)

        assert len(cache.lookup_search_results("python", DDG, 10)) == 1

    def test_freshness_boundary_just_outside_window(self, cache, clock):
        """24시간에서 1초 지나면 미스"""
        cache.upsert_search_results("python", _results("a"), DDG)
        clock.advance(hours=24, seconds=1)

        assert cache.lookup_search_results("python", DDG, 10) == []

    def test_expired_rows_are_not_deleted_by_lookup(self, cache, clock):
        cache.upsert_search_results("python", _results("a"), DDG)
        clock.advance(days=2)

        cache.lookup_search_results("python", DDG, 10)

        assert _count(cache, "search_results") == 1


class TestContentCache:
    """추출 콘텐츠 캐시 테스트"""

    def test_lookup_returns_written_record(self, cache):
        bundle = ContentBundle(text="본문")
        written = cache.upsert_content("https://example.com", bundle, ExtractKind.TEXT, "예제")

        cached = cache.lookup_content("https://example.com")

        assert cached == written
        assert cached.content.text == "본문"

    def test_lookup_miss(self, cache):
        assert cache.lookup_content("https://example.com/none") is None

    def test_later_extraction_replaces_bundle(self, cache):
        """text 추출 후 links 추출하면 links 묶음만 남음"""
        cache.upsert_content("https://example.com", ContentBundle(text="본문"), ExtractKind.TEXT, "예제")
        cache.upsert_content(
            "https://example.com",
            ContentBundle(links=[LinkItem(text="홈", url="https://example.com/")]),
            ExtractKind.LINKS,
            "예제"
        )

        cached = cache.lookup_content("https://example.com")

        assert _count(cache, "extracted_content") == 1
        assert cached.content_type is ExtractKind.LINKS
        assert cached.content.text is None
        assert cached.content.keys() == ["links"]

    def test_freshness_boundary_at_seven_days(self, cache, clock):
        cache.upsert_content("https://example.com", ContentBundle(text="본문"), ExtractKind.TEXT, "예제")

        clock.advance(days=7, seconds=-1)
        assert cache.lookup_content("https://example.com") is not None

        clock.advance(seconds=2)
        assert cache.lookup_content("https://example.com") is None

    def test_corrupt_content_raises_storage_error(self, cache, clock):
        cache._conn.execute(
            "INSERT INTO extracted_content (url, content, content_type, title, timestamp) VALUES (?, ?, ?, ?, ?)",
            ("https://example.com", "{not json", "text", "예제", clock.now.strftime("%Y-%m-%d %H:%M:%S")),
        )

        with pytest.raises(StorageError):
            cache.lookup_content("https://example.com")

    def test_missing_content_type_defaults_to_text(self, cache, clock):
        cache._conn.execute(
            "INSERT INTO extracted_content (url, content, title, timestamp) VALUES (?, ?, ?, ?)",
            ("https://example.com", '{"text": "본문"}', None, clock.now.strftime("%Y-%m-%d %H:%M:%S")),
        )

        cached = cache.lookup_content("https://example.com")

        assert cached.content_type is ExtractKind.TEXT
        assert cached.title == ""


class TestCacheCleanup:
    """기간 기반 캐시 정리 테스트"""

    def _write_aged_rows(self, cache, clock, ages_in_days):
        now = clock.now
        for age in ages_in_days:
            clock.now = now - timedelta(days=age)
            cache.upsert_search_results("python", _results(f"age{age}"), DDG)
            cache.upsert_content(f"https://example.com/age{age}", ContentBundle(text="x"), ExtractKind.TEXT, "")
        clock.now = now

    def test_delete_older_than_days(self, cache, clock):
        """{2일, 6일, 10일} 중 5일 이상 지난 2개 삭제"""
        self._write_aged_rows(cache, clock, [2, 6, 10])

        removed = cache.delete_older_than(5)

        assert removed == 2
        assert _count(cache, "search_results") == 1
        assert _count(cache, "extracted_content") == 3

    def test_delete_all(self, cache, clock):
        self._write_aged_rows(cache, clock, [2, 6, 10])

        assert cache.delete_older_than() == 3
        assert _count(cache, "search_results") == 0

    def test_delete_boundary_is_inclusive(self, cache, clock):
        """정확히 N일 지난 행도 삭제"""
        self._write_aged_rows(cache, clock, [5])
        assert cache.delete_older_than(5) == 1

    def test_delete_content_older_than(self, cache, clock):
        self._write_aged_rows(cache, clock, [2, 6, 10])

        assert cache.delete_content_older_than(5) == 2
        assert cache.delete_content_older_than() == 1
        assert _count(cache, "search_results") == 3

    def test_negative_days_rejected(self, cache):
        with pytest.raises(ValidationError):
            cache.delete_older_than(-1)


class TestAnalyticsAndExport:
    """통계 및 내보내기 조회 테스트"""

    def test_analytics_counts_within_window(self, cache, clock):
        cache.upsert_search_results("python", _results("a", "b", "c"), DDG)
        cache.upsert_search_results("rust", _results("a"), SearchEngine.BING)
        clock.advance(days=40)
        cache.upsert_search_results("go", _results("a", "b"), DDG)
        clock.advance(days=1)

        analytics = cache.get_analytics(30)

        assert analytics.total_results == 2
        assert analytics.unique_queries == 1
        assert analytics.engine_counts == {"duckduckgo": 2}
        assert analytics.top_queries == [("go", 2)]

    def test_analytics_orders_top_queries_by_count(self, cache):
        cache.upsert_search_results("python", _results("a", "b", "c"), DDG)
        cache.upsert_search_results("rust", _results("a"), SearchEngine.BING)
        cache.upsert_search_results("go", _results("a", "b"), SearchEngine.GOOGLE)

        analytics = cache.get_analytics()

        assert analytics.total_results == 6
        assert analytics.unique_queries == 3
        assert analytics.top_queries == [("python", 3), ("go", 2), ("rust", 1)]
        assert list(analytics.engine_counts.items()) == [("duckduckgo", 3), ("google", 2), ("bing", 1)]

    def test_fetch_for_export_filters_query_and_window(self, cache, clock):
        cache.upsert_search_results("python", _results("a"), DDG)
        clock.advance(days=10)
        cache.upsert_search_results("python", _results("b"), DDG)
        cache.upsert_search_results("rust", _results("c"), DDG)

        all_recent = cache.fetch_for_export(days_back=7)
        python_only = cache.fetch_for_export(query="python", days_back=7)

        assert {r.url for r in all_recent} == {"https://example.com/b", "https://example.com/c"}
        assert [r.url for r in python_only] == ["https://example.com/b"]


class TestStorageErrors:
    """sqlite 에러는 StorageError로 전파 (빈 결과로 바뀌지 않음)"""

    def test_missing_table_raises_storage_error(self, cache):
        cache._conn.execute("DROP TABLE search_results")

        with pytest.raises(StorageError):
            cache.lookup_search_results("python", DDG, 10)
        with pytest.raises(StorageError):
            cache.upsert_search_results("python", _results("a"), DDG)

    def test_closed_database_raises_storage_error(self, cache, database):
        database.close()

        with pytest.raises(StorageError):
            cache.lookup_content("https://example.com")
