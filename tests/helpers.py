"""
테스트 헬퍼

- 네트워크 없이 동작하는 FakeRenderer
- 조작 가능한 시계 (naive UTC)
- DuckDuckGo 결과 페이지 HTML 생성기
"""

from datetime import datetime, timedelta
from html import escape
from typing import Callable, List, Optional, Tuple, Union

from websearch.errors import RenderError
from websearch.rendering.base import PageRenderer, RenderedPage, read_title


START_TIME = datetime(2024, 1, 15, 12, 0, 0)


class MutableClock:
    """테스트용 시계 (advance로 시간 이동)"""

    def __init__(self, now: datetime = START_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeRenderer(PageRenderer):
    """URL별 응답 함수로 동작하는 렌더러

    responder가 Exception을 반환하면 RenderError로 실패한다.
    """

    def __init__(self, responder: Callable[[str], Union[str, Exception]]):
        self.responder = responder
        self.calls: List[str] = []
        self.evaluate_calls = 0
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    def render(self, url: str) -> RenderedPage:
        self.calls.append(url)
        html = self.responder(url)
        if isinstance(html, Exception):
            raise RenderError(url, str(html))
        page = RenderedPage(url=url, html=html)
        page.title = super().evaluate(page, read_title)
        return page

    def evaluate(self, page, extractor):
        self.evaluate_calls += 1
        return super().evaluate(page, extractor)

    def close(self) -> None:
        self.closed = True


def build_duckduckgo_html(results: List[Tuple[Optional[str], Optional[str], Optional[str]]]) -> str:
    """(title, url, snippet) 목록으로 DuckDuckGo HTML 결과 페이지 생성

    title이 None이면 제목 앵커를 생략하고, url이 None이면 href를 생략한다.
    """
    blocks = []
    for title, url, snippet in results:
        title_html = ""
        if title is not None:
            href = f' href="{escape(url)}"' if url is not None else ""
            title_html = f'<h2 class="result__title"><a class="result__a"{href}>{escape(title)}</a></h2>'
        snippet_html = f'<a class="result__snippet">{escape(snippet)}</a>' if snippet is not None else ""
        blocks.append(f'<div class="result results_links">{title_html}{snippet_html}</div>')
    return (
        "<html><head><title>DuckDuckGo</title></head><body>"
        f'<div id="links">{"".join(blocks)}</div>'
        "</body></html>"
    )
