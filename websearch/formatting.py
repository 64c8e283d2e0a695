"""
도구 응답 텍스트 포맷터

MCP 서버와 CLI가 공유하는 사람이 읽기 쉬운 응답 형식
"""

from typing import List

from websearch.models.data_models import (
    BulkSearchEntry,
    ClearCacheResult,
    SearchAnalytics,
    SearchResultRecord,
)
from websearch.orchestrator import ExportOutcome, ExtractionOutcome, SearchOutcome


# 추출 응답에 표시할 최대 항목 수
MAX_LINKS_SHOWN = 10
MAX_IMAGES_SHOWN = 5
# 내보내기 응답 미리보기 길이
EXPORT_PREVIEW_LENGTH = 2000


def truncate(text: str, max_length: int) -> str:
    """max_length를 넘으면 자르고 '...' 추가"""
    if max_length is None or len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."


def format_search_results(
    query: str,
    engine: str,
    records: List[SearchResultRecord],
    from_cache: bool = False
) -> str:
    """검색 결과 응답"""
    label = "cached results" if from_cache else "results"
    lines = [f'Found {len(records)} {label} for "{query}" on {engine}:\n']
    for i, record in enumerate(records, 1):
        lines.append(f"{i}. **{record.title}**\n   {record.url}\n   {record.snippet}\n")
    return "\n".join(lines)


def format_search_outcome(query: str, engine: str, outcome: SearchOutcome) -> str:
    return format_search_results(query, engine, outcome.records, outcome.from_cache)


def format_extraction(outcome: ExtractionOutcome, max_length: int = 5000) -> str:
    """콘텐츠 추출 응답

    Args:
        outcome: 추출 결과
        max_length: 본문 텍스트 최대 길이
    """
    record = outcome.record
    bundle = record.content
    header = "Cached content from" if outcome.from_cache else "Content extracted from"
    text = f"{header} {record.url}:\n\n"

    if bundle.text is not None:
        text += f"**Text Content:**\n{truncate(bundle.text, max_length)}\n\n"

    if bundle.links is not None:
        text += f"**Links ({len(bundle.links)}):**\n"
        for i, link in enumerate(bundle.links[:MAX_LINKS_SHOWN], 1):
            text += f"{i}. [{link.text}]({link.url})\n"
        if len(bundle.links) > MAX_LINKS_SHOWN:
            text += f"... and {len(bundle.links) - MAX_LINKS_SHOWN} more\n"
        text += "\n"

    if bundle.images is not None:
        text += f"**Images ({len(bundle.images)}):**\n"
        for i, image in enumerate(bundle.images[:MAX_IMAGES_SHOWN], 1):
            text += f"{i}. {image.alt or 'No alt text'}: {image.src}\n"
        if len(bundle.images) > MAX_IMAGES_SHOWN:
            text += f"... and {len(bundle.images) - MAX_IMAGES_SHOWN} more\n"
        text += "\n"

    return text.rstrip("\n")


def format_bulk_results(entries: List[BulkSearchEntry]) -> str:
    """일괄 검색 응답"""
    text = f"Bulk search completed for {len(entries)} queries:\n\n"
    for i, entry in enumerate(entries, 1):
        text += f'**Query {i}: "{entry.query}"**\n'
        if entry.error is not None:
            text += f"Error: {entry.error}\n\n"
            continue
        text += f"Found {entry.count} results:\n"
        for j, record in enumerate(entry.results, 1):
            text += f"{j}. {record.title}\n   {record.url}\n"
        text += "\n"
    return text.rstrip("\n")


def format_analytics(analytics: SearchAnalytics) -> str:
    """검색 통계 응답"""
    text = f"Search Analytics (Last {analytics.days_back} days):\n\n"
    text += "**Overall Stats:**\n"
    text += f"- Total search results: {analytics.total_results}\n"
    text += f"- Unique queries: {analytics.unique_queries}\n\n"

    text += "**Search Engine Usage:**\n"
    for engine, count in analytics.engine_counts.items():
        text += f"- {engine}: {count} results\n"

    text += "\n**Top Queries:**\n"
    for i, (query, count) in enumerate(analytics.top_queries, 1):
        text += f'{i}. "{query}" ({count} times)\n'
    return text.rstrip("\n")


def format_export(outcome: ExportOutcome) -> str:
    """내보내기 응답 (미리보기는 EXPORT_PREVIEW_LENGTH자까지)"""
    preview = outcome.data[:EXPORT_PREVIEW_LENGTH]
    if len(outcome.data) > EXPORT_PREVIEW_LENGTH:
        preview += "\n... (truncated)"
    return (
        f"Exported {outcome.record_count} search results to {outcome.format.upper()} format:\n\n"
        f"```{outcome.format}\n{preview}\n```\n\n"
        f"Suggested filename: {outcome.filename}"
    )


def format_clear_result(result: ClearCacheResult, include_content: bool = False) -> str:
    """캐시 정리 응답"""
    text = f"Cleared {result.search_results_removed} cached search results."
    if include_content:
        text += f" Cleared {result.content_removed} cached extracted pages."
    return text
