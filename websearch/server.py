"""
웹 검색 MCP 서버

- FastMCP 기반 도구 6종: web_search, extract_content, bulk_search,
  search_analytics, export_results, clear_cache
- 도구 본문은 단일 워커 스레드에서 순서대로 실행 (이벤트 루프 비차단)
- 로그는 stderr로 출력 (stdout은 MCP 프로토콜 채널)
"""

import asyncio
import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from mcp.server.fastmcp import FastMCP

from websearch.errors import WebSearchError
from websearch.formatting import (
    format_analytics,
    format_bulk_results,
    format_clear_result,
    format_export,
    format_extraction,
    format_search_outcome,
)
from websearch.models.config import SearchConfig
from websearch.orchestrator import WebSearchOrchestrator


logger = logging.getLogger(__name__)

mcp = FastMCP("web-search-server")

_orchestrator: Optional[WebSearchOrchestrator] = None
_orchestrator_lock = threading.Lock()
_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="websearch-tool")


def get_orchestrator() -> WebSearchOrchestrator:
    """프로세스 공용 오케스트레이터 반환 (최초 호출 시 생성)"""
    global _orchestrator
    with _orchestrator_lock:
        if _orchestrator is None:
            _orchestrator = WebSearchOrchestrator(SearchConfig.from_env())
        return _orchestrator


def set_orchestrator(orchestrator: Optional[WebSearchOrchestrator]) -> None:
    """공용 오케스트레이터 교체 (테스트 및 임베딩용)"""
    global _orchestrator
    with _orchestrator_lock:
        _orchestrator = orchestrator


def _error_text(error: Exception) -> str:
    return f"Error: {error}"


async def _run_tool(name: str, operation: Callable[[WebSearchOrchestrator], str]) -> str:
    """오케스트레이터 작업을 전용 워커 스레드에서 실행

    렌더링과 sqlite 호출이 이벤트 루프를 막지 않도록 단일 워커 executor로 넘긴다.
    Playwright sync API는 생성한 스레드에서만 쓸 수 있으므로 워커는 하나로 고정.

    Args:
        name: 로그용 도구 이름
        operation: 오케스트레이터를 받아 응답 텍스트를 반환하는 함수

    Returns:
        응답 텍스트. WebSearchError는 "Error: <message>"로 변환
    """
    def call() -> str:
        try:
            return operation(get_orchestrator())
        except WebSearchError as e:
            logger.error(f"{name} 실패: {e}")
            return _error_text(e)

    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_executor, call)


@mcp.tool()
async def web_search(
    query: str,
    max_results: int = 10,
    search_engine: str = "duckduckgo",
    site_filter: Optional[str] = None,
    file_type: Optional[str] = None,
    date_range: Optional[str] = None,
    use_cache: bool = True
) -> str:
    """
    Search the web using DuckDuckGo, Google or Bing with caching and filters.

    Args:
        query: Search query
        max_results: Maximum number of results
        search_engine: duckduckgo, google or bing
        site_filter: Limit search to a specific domain (e.g. github.com)
        file_type: Search for a specific file type (e.g. pdf)
        date_range: day, week, month or year
        use_cache: Use cached results if available
    """
    def operation(orchestrator: WebSearchOrchestrator) -> str:
        outcome = orchestrator.search_detailed(
            query,
            max_results=max_results,
            engine=search_engine,
            site_filter=site_filter,
            file_type=file_type,
            date_range=date_range,
            use_cache=use_cache
        )
        return format_search_outcome(query, search_engine, outcome)

    return await _run_tool("web_search", operation)


@mcp.tool()
async def extract_content(url: str, extract_type: str = "text", max_length: int = 5000) -> str:
    """
    Extract text, links or images from a web page.

    Args:
        url: URL of the page to extract content from
        extract_type: text, links, images or all
        max_length: Maximum length of the extracted text
    """
    return await _run_tool(
        "extract_content",
        lambda orchestrator: format_extraction(orchestrator.extract(url, extract_type), max_length)
    )


@mcp.tool()
async def bulk_search(
    queries: List[str],
    max_results_per_query: int = 5,
    search_engine: str = "duckduckgo"
) -> str:
    """
    Run several searches sequentially and report the results per query.

    Args:
        queries: List of search queries
        max_results_per_query: Maximum results per query
        search_engine: duckduckgo, google or bing
    """
    return await _run_tool(
        "bulk_search",
        lambda orchestrator: format_bulk_results(orchestrator.bulk_search(
            queries,
            max_results_per_query=max_results_per_query,
            engine=search_engine
        ))
    )


@mcp.tool()
async def search_analytics(days_back: int = 30) -> str:
    """
    Show statistics about cached search history.

    Args:
        days_back: Number of days to analyze
    """
    return await _run_tool(
        "search_analytics",
        lambda orchestrator: format_analytics(orchestrator.search_analytics(days_back))
    )


@mcp.tool()
async def export_results(query: Optional[str] = None, format: str = "json", days_back: int = 7) -> str:
    """
    Export cached search results as JSON or CSV.

    Args:
        query: Export results for this query only (all queries when omitted)
        format: json or csv
        days_back: Number of days to export
    """
    return await _run_tool(
        "export_results",
        lambda orchestrator: format_export(orchestrator.export_results(query, fmt=format, days_back=days_back))
    )


@mcp.tool()
async def clear_cache(older_than_days: Optional[int] = None, include_content: bool = False) -> str:
    """
    Clear cached search results.

    Args:
        older_than_days: Only clear entries at least this many days old (all when omitted)
        include_content: Also clear cached extracted page content
    """
    return await _run_tool(
        "clear_cache",
        lambda orchestrator: format_clear_result(
            orchestrator.clear_cache(older_than_days, include_content), include_content
        )
    )


def main() -> None:
    """MCP 서버 실행 (stdio)"""
    config = SearchConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr
    )
    set_orchestrator(WebSearchOrchestrator(config))
    logger.info("웹 검색 MCP 서버 시작")

    try:
        mcp.run()
    finally:
        orchestrator = _orchestrator
        set_orchestrator(None)
        if orchestrator is not None:
            # 렌더러는 도구 워커 스레드에서 만들어졌으므로 같은 스레드에서 종료
            _executor.submit(orchestrator.close).result()
        _executor.shutdown()


if __name__ == "__main__":
    main()
