"""
RequestsRenderer - 정적 HTML 렌더러

- requests 세션으로 페이지 HTML 가져오기
- 설정된 User-Agent 및 타임아웃 사용
- 실패 시 RenderError (재시도 없음)
"""

import logging
from typing import Optional

import requests
from requests.exceptions import HTTPError, RequestException, Timeout

from websearch.errors import RenderError
from websearch.models.config import SearchConfig
from websearch.rendering.base import PageRenderer, RenderedPage, read_title


logger = logging.getLogger(__name__)


class RequestsRenderer(PageRenderer):
    """requests 기반 렌더러

    JavaScript는 실행하지 않는다. DuckDuckGo HTML 버전처럼 정적 페이지에 적합.
    """

    def __init__(self, config: Optional[SearchConfig] = None, session: Optional[requests.Session] = None):
        """RequestsRenderer 초기화

        Args:
            config: 설정 (user_agent, navigation_timeout)
            session: 사용할 requests 세션. None이면 새로 생성
        """
        if config is None:
            config = SearchConfig()

        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Accept-Encoding": "gzip, deflate",  # br 제외 - 일부 환경에서 디코딩 문제 발생
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
        })

        self.connect_timeout = min(10.0, config.navigation_timeout)
        self.read_timeout = config.navigation_timeout

    @property
    def name(self) -> str:
        return "requests"

    def render(self, url: str) -> RenderedPage:
        """URL에서 HTML 가져오기

        Raises:
            RenderError: 타임아웃, HTTP 에러, 요청 에러 시
        """
        logger.info(f"페이지 요청: {url}")

        try:
            response = self.session.get(url, timeout=(self.connect_timeout, self.read_timeout))
            response.raise_for_status()
        except Timeout:
            logger.error(f"타임아웃 발생: {url}")
            raise RenderError(url, f"타임아웃 ({self.read_timeout}초)")
        except HTTPError as e:
            logger.error(f"HTTP 에러 발생: {url} - {e}")
            raise RenderError(url, f"HTTP 에러: {e}")
        except RequestException as e:
            logger.error(f"요청 에러 발생: {url} - {e}")
            raise RenderError(url, f"요청 에러: {e}")

        # Content-Type의 charset 우선, 없으면 추정 인코딩 사용
        if not response.encoding:
            response.encoding = response.apparent_encoding or "utf-8"

        html = response.text
        page = RenderedPage(url=response.url or url, html=html)
        page.title = self.evaluate(page, read_title)

        logger.debug(f"페이지 로드 완료: {page.url} ({len(html)} bytes)")
        return page

    def close(self) -> None:
        """세션 종료"""
        self.session.close()
