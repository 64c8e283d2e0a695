# Rendering Module
"""
페이지 렌더러 모듈
- PageRenderer: 렌더러 추상 클래스
- RequestsRenderer: requests 기반 정적 HTML 렌더러
- PlaywrightRenderer: 헤드리스 브라우저 렌더러 (browser extra 필요)
"""

from typing import Optional

from websearch.errors import ValidationError
from websearch.models.config import SearchConfig
from websearch.rendering.base import PageRenderer, RenderedPage, read_title
from websearch.rendering.http import RequestsRenderer


def create_renderer(config: Optional[SearchConfig] = None) -> PageRenderer:
    """설정에 맞는 렌더러 생성

    Args:
        config: 설정 (renderer: "requests" 또는 "playwright")

    Returns:
        PageRenderer 인스턴스

    Raises:
        ValidationError: 지원하지 않는 렌더러인 경우
    """
    config = config or SearchConfig()
    kind = config.renderer.strip().lower()

    if kind == "requests":
        return RequestsRenderer(config)
    if kind == "playwright":
        from websearch.rendering.browser import PlaywrightRenderer
        return PlaywrightRenderer(config)

    raise ValidationError(f"지원하지 않는 렌더러: {config.renderer!r} (지원: ['requests', 'playwright'])")


__all__ = [
    "PageRenderer",
    "RenderedPage",
    "RequestsRenderer",
    "create_renderer",
    "read_title",
]
