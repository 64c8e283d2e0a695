"""
WebSearchOrchestrator Integration Tests

- 검색 → 캐시 저장 → 캐시 히트 end-to-end
- 일괄 검색의 쿼리별 실패 격리
- 종류별 콘텐츠 캐시와 덮어쓰기
- 캐시 정리, 통계, 내보내기
"""

import csv
import io
import json
from datetime import timedelta
from unittest.mock import patch
from urllib.parse import parse_qs, quote, urlparse

import pytest

from helpers import FakeRenderer, build_duckduckgo_html
from websearch.errors import RenderError, StorageError, ValidationError
from websearch.models.config import SearchConfig
from websearch.models.data_models import ContentBundle, ExtractKind, SearchEngine
from websearch.orchestrator import WebSearchOrchestrator
from websearch.storage.database import CacheDatabase


ARTICLE_URL = "https://example.com/article"

ARTICLE_HTML = """
<html><head><title>Article</title></head>
<body>
  <p>Article body</p>
  <a href="/next">Next</a>
  <img src="/a.png" alt="A">
</body></html>
"""

GOOGLE_HTML = """
<html><body>
<div class="g"><a href="https://www.python.org/"><h3>Python</h3></a><div class="VwiC3b">Official</div></div>
</body></html>
"""


def respond(url):
    """검색 URL은 검색어로 결과 페이지를 만들고, 'fail'이 들어간 검색어는 실패"""
    parsed = urlparse(url)
    if parsed.netloc == "duckduckgo.com":
        query = parse_qs(parsed.query)["q"][0]
        if "fail" in query:
            return ConnectionError("network unreachable")
        return build_duckduckgo_html([
            (f"{query} {i}", f"https://example.com/{quote(query)}/{i}", f"snippet {i}")
            for i in range(3)
        ])
    if parsed.netloc == "www.google.com":
        return GOOGLE_HTML
    if url == ARTICLE_URL:
        return ARTICLE_HTML
    return ConnectionError(f"unknown url {url}")


@pytest.fixture
def renderer():
    return FakeRenderer(respond)


@pytest.fixture
def orchestrator(renderer, clock):
    orch = WebSearchOrchestrator(SearchConfig(db_path=":memory:"), renderer=renderer, clock=clock)
    yield orch
    orch.close()


def _count(orchestrator, table):
    return orchestrator.database.connection.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


class TestSearch:
    """검색 및 검색 결과 캐시"""

    def test_miss_renders_and_caches(self, orchestrator, renderer):
        records = orchestrator.search("python", max_results=5)

        assert [r.title for r in records] == ["python 0", "python 1", "python 2"]
        assert all(r.search_engine is SearchEngine.DUCKDUCKGO for r in records)
        assert renderer.calls == ["https://duckduckgo.com/html/?q=python"]
        assert _count(orchestrator, "search_results") == 3

    def test_second_search_is_served_from_cache(self, orchestrator, renderer, clock):
        """TTL 이내 재검색은 렌더링 없이 같은 레코드를 반환"""
        first = orchestrator.search_detailed("python")
        clock.advance(hours=23)
        second = orchestrator.search_detailed("python")

        assert not first.from_cache
        assert second.from_cache
        assert second.records == first.records
        assert len(renderer.calls) == 1

    def test_expired_cache_triggers_new_search(self, orchestrator, renderer, clock):
        orchestrator.search("python")
        clock.advance(hours=25)

        outcome = orchestrator.search_detailed("python")

        assert not outcome.from_cache
        assert len(renderer.calls) == 2

    def test_use_cache_false_skips_lookup_but_writes(self, orchestrator, renderer):
        orchestrator.search("python")
        orchestrator.search("python", use_cache=False)

        assert len(renderer.calls) == 2
        assert _count(orchestrator, "search_results") == 3

    def test_filters_are_part_of_search_url(self, orchestrator, renderer):
        orchestrator.search("asyncio", engine="google", site_filter="python.org", file_type="pdf", date_range="month")

        assert renderer.calls == [
            "https://www.google.com/search?q=asyncio%20site%3Apython.org%20filetype%3Apdf&tbs=qdr:m"
        ]

    def test_filtered_search_cached_under_raw_query(self, orchestrator, renderer):
        """캐시 키는 연산자를 붙이기 전의 검색어와 필터"""
        orchestrator.search("asyncio", engine="google", site_filter="python.org")
        outcome = orchestrator.search_detailed("asyncio", engine="google", site_filter="python.org")

        assert outcome.from_cache
        assert outcome.records[0].query == "asyncio"
        assert outcome.records[0].site_filter == "python.org"
        assert len(renderer.calls) == 1

    def test_duplicate_urls_on_page_are_collapsed(self, clock):
        html = build_duckduckgo_html([
            ("First", "https://example.com/a", ""),
            ("Again", "https://example.com/a/", ""),
            ("Other", "https://example.com/b", ""),
        ])
        renderer = FakeRenderer(lambda url: html)

        with WebSearchOrchestrator(SearchConfig(db_path=":memory:"), renderer=renderer, clock=clock) as orch:
            records = orch.search("dupes")

        assert [r.title for r in records] == ["First", "Other"]

    @pytest.mark.parametrize("kwargs", [
        {"query": ""},
        {"query": "   "},
        {"query": "python", "max_results": 0},
        {"query": "python", "max_results": 2.5},
        {"query": "python", "max_results": True},
        {"query": "python", "max_results": "3"},
        {"query": "python", "engine": "yahoo"},
        {"query": "python", "date_range": "decade"},
    ])
    def test_invalid_input_rejected_before_rendering(self, orchestrator, renderer, kwargs):
        with pytest.raises(ValidationError):
            orchestrator.search(**kwargs)
        assert renderer.calls == []

    def test_render_failure_propagates_and_caches_nothing(self, orchestrator):
        with pytest.raises(RenderError):
            orchestrator.search("fail please")

        assert _count(orchestrator, "search_results") == 0

    def test_cache_write_failure_is_surfaced(self, orchestrator):
        with patch.object(
            orchestrator.cache, "upsert_search_results", side_effect=StorageError("upsert_search_results")
        ):
            with pytest.raises(StorageError):
                orchestrator.search("python")


class TestBulkSearch:
    """일괄 검색"""

    def test_failure_is_isolated_per_query(self, orchestrator):
        """3개 중 2번째만 실패하면 3개 항목, 2번째에 error"""
        entries = orchestrator.bulk_search(["rust", "fail here", "go"], max_results_per_query=2)

        assert [e.query for e in entries] == ["rust", "fail here", "go"]
        assert entries[0].ok and entries[0].count == 2
        assert not entries[1].ok
        assert "network unreachable" in entries[1].error
        assert entries[2].ok and entries[2].count == 2

    def test_bulk_search_bypasses_cache_read_but_writes(self, orchestrator, renderer):
        orchestrator.search("rust")
        entries = orchestrator.bulk_search(["rust"])

        assert len(renderer.calls) == 2
        assert entries[0].count == 3
        assert orchestrator.search_detailed("rust").from_cache

    def test_blank_query_in_batch_becomes_entry_error(self, orchestrator):
        entries = orchestrator.bulk_search(["rust", ""])

        assert entries[0].ok
        assert not entries[1].ok

    def test_empty_query_list_rejected(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.bulk_search([])

    @pytest.mark.parametrize("count", [0, 2.5, True])
    def test_invalid_count_rejected_before_rendering(self, orchestrator, renderer, count):
        with pytest.raises(ValidationError):
            orchestrator.bulk_search(["rust"], max_results_per_query=count)
        assert renderer.calls == []


class TestExtract:
    """콘텐츠 추출 및 콘텐츠 캐시"""

    def test_extract_text_then_cache_hit(self, orchestrator, renderer):
        first = orchestrator.extract(ARTICLE_URL)
        second = orchestrator.extract(ARTICLE_URL, "text")

        assert not first.from_cache
        assert first.record.content.text == "Article body\nNext"
        assert first.record.title == "Article"
        assert second.from_cache
        assert second.record == first.record
        assert renderer.calls == [ARTICLE_URL]

    def test_different_kind_extracts_again_and_overwrites(self, orchestrator, renderer):
        """text 캐시가 있어도 links 요청은 새로 추출하고, 묶음 전체를 대체"""
        orchestrator.extract(ARTICLE_URL, "text")
        links = orchestrator.extract(ARTICLE_URL, "links")
        text_again = orchestrator.extract(ARTICLE_URL, "text")

        assert not links.from_cache
        assert links.record.content.keys() == ["links"]
        assert links.record.content.links[0].url == "https://example.com/next"
        assert not text_again.from_cache
        assert len(renderer.calls) == 3
        assert _count(orchestrator, "extracted_content") == 1

    def test_all_extraction_serves_every_kind(self, orchestrator, renderer):
        orchestrator.extract(ARTICLE_URL, ExtractKind.ALL)

        text = orchestrator.extract(ARTICLE_URL, "text")
        images = orchestrator.extract(ARTICLE_URL, "images")

        assert images.from_cache
        assert images.record.content.keys() == ["images"]
        assert images.record.content_type is ExtractKind.IMAGES
        assert text.from_cache
        assert text.record.content.keys() == ["text"]
        assert text.record.content.text == "Article body\nNext"
        assert images.record.content.images[0].src == "https://example.com/a.png"
        assert len(renderer.calls) == 1

    def test_expired_content_extracts_again(self, orchestrator, renderer, clock):
        orchestrator.extract(ARTICLE_URL)
        clock.advance(days=7, seconds=1)

        assert not orchestrator.extract(ARTICLE_URL).from_cache
        assert len(renderer.calls) == 2

    @pytest.mark.parametrize("url", ["", "ftp://example.com/file", "example.com"])
    def test_invalid_url_rejected(self, orchestrator, url):
        with pytest.raises(ValidationError):
            orchestrator.extract(url)

    def test_render_failure_propagates(self, orchestrator):
        with pytest.raises(RenderError):
            orchestrator.extract("https://example.com/unknown")


class TestCacheManagement:
    """캐시 정리, 통계, 내보내기"""

    def _search_at_ages(self, orchestrator, clock, ages):
        now = clock.now
        for age in ages:
            clock.now = now - timedelta(days=age)
            orchestrator.search(f"age {age}", max_results=1)
            orchestrator.cache.upsert_content(
                f"https://example.com/page-{age}", ContentBundle(text="x"), ExtractKind.TEXT, ""
            )
        clock.now = now

    def test_clear_cache_older_than(self, orchestrator, clock):
        """{2일, 6일, 10일} 중 5일 이상 지난 2개 삭제, 콘텐츠는 유지"""
        self._search_at_ages(orchestrator, clock, [2, 6, 10])
        content_before = _count(orchestrator, "extracted_content")

        result = orchestrator.clear_cache(5)

        assert result.search_results_removed == 2
        assert result.content_removed == 0
        assert _count(orchestrator, "extracted_content") == content_before

    def test_clear_cache_all_with_content(self, orchestrator, clock):
        self._search_at_ages(orchestrator, clock, [2, 6, 10])
        content_before = _count(orchestrator, "extracted_content")

        result = orchestrator.clear_cache(include_content=True)

        assert result.search_results_removed == 3
        assert result.content_removed == content_before
        assert result.total == 3 + content_before

    def test_search_analytics(self, orchestrator):
        orchestrator.search("rust")
        orchestrator.search("python", engine="google")

        analytics = orchestrator.search_analytics(7)

        assert analytics.total_results == 4
        assert analytics.unique_queries == 2
        assert analytics.engine_counts == {"duckduckgo": 3, "google": 1}
        assert analytics.top_queries[0] == ("rust", 3)

    def test_search_analytics_rejects_non_positive_days(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.search_analytics(0)

    def test_export_json(self, orchestrator):
        orchestrator.search("rust")
        orchestrator.search("go")

        outcome = orchestrator.export_results(query="rust")
        data = json.loads(outcome.data)

        assert outcome.format == "json"
        assert outcome.record_count == 3
        assert outcome.filename == "search_export_2024-01-15.json"
        assert {row["query"] for row in data} == {"rust"}
        assert data[0]["timestamp"] == "2024-01-15 12:00:00"

    def test_export_csv(self, orchestrator):
        orchestrator.search("rust", max_results=1)

        outcome = orchestrator.export_results(fmt="csv")
        rows = list(csv.reader(io.StringIO(outcome.data)))

        assert outcome.filename.endswith(".csv")
        assert rows[0] == ["Query", "URL", "Title", "Snippet", "Search Engine", "Timestamp"]
        assert rows[1] == ["rust", "https://example.com/rust/0", "rust 0", "snippet 0", "duckduckgo", "2024-01-15 12:00:00"]

    def test_export_unknown_format_rejected(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.export_results(fmt="xml")


class TestLifecycle:
    """수명 주기"""

    def test_unknown_renderer_leaves_database_closed(self):
        database = CacheDatabase(":memory:")

        with pytest.raises(ValidationError):
            WebSearchOrchestrator(SearchConfig(db_path=":memory:", renderer="netscape"), database=database)

        assert not database.is_open

    def test_close_releases_renderer_and_database(self, renderer, clock):
        orch = WebSearchOrchestrator(SearchConfig(db_path=":memory:"), renderer=renderer, clock=clock)

        orch.close()

        assert renderer.closed
        assert not orch.database.is_open

    def test_file_database_persists_between_instances(self, tmp_path, clock):
        config = SearchConfig(db_path=str(tmp_path / "cache.db"))

        with WebSearchOrchestrator(config, renderer=FakeRenderer(respond), clock=clock) as orch:
            orch.search("rust")

        renderer = FakeRenderer(respond)
        with WebSearchOrchestrator(config, renderer=renderer, clock=clock) as orch:
            outcome = orch.search_detailed("rust")

        assert outcome.from_cache
        assert renderer.calls == []
