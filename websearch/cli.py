"""
websearch 명령행 도구

사용 예:
  websearch search "python asyncio" --engine bing --max-results 5
  websearch extract https://example.com --type links
  websearch bulk "rust" "go" "zig"
  websearch analytics --days-back 7
  websearch export --format csv --output results.csv
  websearch clear --older-than-days 7 --include-content
"""

import argparse
import logging
import sys
from typing import List, Optional

from websearch.errors import WebSearchError
from websearch.exporters.exporters import ExporterFactory
from websearch.formatting import (
    format_analytics,
    format_bulk_results,
    format_clear_result,
    format_export,
    format_extraction,
    format_search_outcome,
)
from websearch.models.config import SearchConfig
from websearch.models.data_models import DateRange, ExtractKind, SearchEngine
from websearch.orchestrator import WebSearchOrchestrator


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """명령행 파서 구성"""
    engines = [engine.value for engine in SearchEngine]

    parser = argparse.ArgumentParser(
        prog="websearch",
        description="캐시 기반 웹 검색 및 콘텐츠 추출 도구",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--env-file", help=".env 파일 경로")
    parser.add_argument("--db-path", help="캐시 DB 경로 (WEBSEARCH_DB_PATH보다 우선)")
    parser.add_argument("--renderer", choices=["requests", "playwright"], help="페이지 렌더러")
    parser.add_argument("-v", "--verbose", action="store_true", help="DEBUG 로그 출력")

    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="웹 검색")
    search.add_argument("query", help="검색어")
    search.add_argument("--max-results", type=int, default=10)
    search.add_argument("--engine", choices=engines, default="duckduckgo")
    search.add_argument("--site", dest="site_filter", help="도메인 제한 (예: github.com)")
    search.add_argument("--file-type", help="파일 형식 제한 (예: pdf)")
    search.add_argument("--date-range", choices=[d.value for d in DateRange])
    search.add_argument("--no-cache", action="store_true", help="캐시 조회 건너뛰기")

    extract = subparsers.add_parser("extract", help="페이지 콘텐츠 추출")
    extract.add_argument("url", help="대상 URL")
    extract.add_argument("--type", dest="extract_type", choices=[k.value for k in ExtractKind], default="text")
    extract.add_argument("--max-length", type=int, default=5000)

    bulk = subparsers.add_parser("bulk", help="일괄 검색")
    bulk.add_argument("queries", nargs="+", help="검색어 목록")
    bulk.add_argument("--max-results-per-query", type=int, default=5)
    bulk.add_argument("--engine", choices=engines, default="duckduckgo")

    analytics = subparsers.add_parser("analytics", help="검색 기록 통계")
    analytics.add_argument("--days-back", type=int, default=30)

    export = subparsers.add_parser("export", help="검색 결과 내보내기")
    export.add_argument("--query", help="특정 검색어만 내보내기")
    export.add_argument("--format", choices=ExporterFactory.get_supported_formats(), default="json")
    export.add_argument("--days-back", type=int, default=7)
    export.add_argument("--output", help="저장할 파일 경로. 생략하면 미리보기만 출력")

    clear = subparsers.add_parser("clear", help="캐시 정리")
    clear.add_argument("--older-than-days", type=float, help="이 일수 이상 지난 항목만 삭제")
    clear.add_argument("--include-content", action="store_true", help="추출 콘텐츠 캐시도 정리")

    return parser


def run_command(args: argparse.Namespace, orchestrator: WebSearchOrchestrator) -> str:
    """서브커맨드 실행 후 출력 텍스트 반환"""
    if args.command == "search":
        outcome = orchestrator.search_detailed(
            args.query,
            max_results=args.max_results,
            engine=args.engine,
            site_filter=args.site_filter,
            file_type=args.file_type,
            date_range=args.date_range,
            use_cache=not args.no_cache
        )
        return format_search_outcome(args.query, args.engine, outcome)

    if args.command == "extract":
        outcome = orchestrator.extract(args.url, args.extract_type)
        return format_extraction(outcome, args.max_length)

    if args.command == "bulk":
        entries = orchestrator.bulk_search(
            args.queries,
            max_results_per_query=args.max_results_per_query,
            engine=args.engine
        )
        return format_bulk_results(entries)

    if args.command == "analytics":
        return format_analytics(orchestrator.search_analytics(args.days_back))

    if args.command == "export":
        if args.output:
            records = orchestrator.cache.fetch_for_export(args.query, args.days_back)
            path = ExporterFactory.create(args.format).export(records, args.output)
            return f"Exported {len(records)} search results to {path}"
        outcome = orchestrator.export_results(args.query, fmt=args.format, days_back=args.days_back)
        return format_export(outcome)

    if args.command == "clear":
        result = orchestrator.clear_cache(args.older_than_days, args.include_content)
        return format_clear_result(result, args.include_content)

    raise ValueError(f"알 수 없는 명령: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """명령행 진입점

    Returns:
        종료 코드 (성공 0, 실패 1)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    config = SearchConfig.from_env(args.env_file)
    if args.db_path:
        config.db_path = args.db_path
    if args.renderer:
        config.renderer = args.renderer

    level = logging.DEBUG if args.verbose else getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr
    )

    try:
        with WebSearchOrchestrator(config) as orchestrator:
            print(run_command(args, orchestrator))
    except WebSearchError as e:
        logger.error(f"명령 실패: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
