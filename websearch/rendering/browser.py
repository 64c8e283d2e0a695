"""
PlaywrightRenderer - 헤드리스 브라우저 렌더러

- Chromium을 한 번 띄워 재사용하고 요청마다 새 컨텍스트/페이지 사용
- networkidle 대기 후 렌더링된 DOM을 RenderedPage로 반환
"""

import logging
from typing import Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from websearch.errors import RenderError
from websearch.models.config import SearchConfig
from websearch.rendering.base import PageRenderer, RenderedPage


logger = logging.getLogger(__name__)


LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
    "--disable-extensions",
    "--mute-audio",
    "--no-first-run",
]


class PlaywrightRenderer(PageRenderer):
    """Playwright(Chromium) 기반 렌더러

    JavaScript가 필요한 검색 결과 페이지(Google, Bing)에 사용한다.
    """

    def __init__(self, config: Optional[SearchConfig] = None):
        if config is None:
            config = SearchConfig()

        self.config = config
        self._playwright = None
        self._browser = None

    @property
    def name(self) -> str:
        return "playwright"

    def _ensure_browser(self):
        """브라우저 지연 실행"""
        if self._browser is not None and self._browser.is_connected():
            return self._browser

        if self._playwright is None:
            self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(headless=True, args=LAUNCH_ARGS)
        logger.info("Chromium 실행 완료")
        return self._browser

    def render(self, url: str) -> RenderedPage:
        """페이지 렌더링

        Raises:
            RenderError: 브라우저 실행 실패, 네비게이션 타임아웃, 기타 브라우저 에러
        """
        timeout_ms = self.config.navigation_timeout * 1000
        logger.info(f"페이지 렌더링: {url}")

        try:
            browser = self._ensure_browser()
            context = browser.new_context(user_agent=self.config.user_agent)
        except PlaywrightError as e:
            logger.error(f"브라우저 실행 실패: {e}")
            raise RenderError(url, f"브라우저 실행 실패: {e}")

        try:
            page = context.new_page()
            response = page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            if response is not None and response.status >= 400:
                raise RenderError(url, f"HTTP {response.status}")
            rendered = RenderedPage(url=page.url, html=page.content(), title=page.title().strip())
        except PlaywrightTimeoutError:
            logger.error(f"네비게이션 타임아웃: {url}")
            raise RenderError(url, f"타임아웃 ({self.config.navigation_timeout}초)")
        except PlaywrightError as e:
            logger.error(f"렌더링 실패: {url} - {e}")
            raise RenderError(url, str(e))
        finally:
            context.close()

        logger.debug(f"렌더링 완료: {rendered.url} ({len(rendered.html)} bytes)")
        return rendered

    def close(self) -> None:
        """브라우저 종료"""
        if self._browser is not None:
            try:
                self._browser.close()
            except PlaywrightError as e:
                logger.warning(f"브라우저 종료 중 에러: {e}")
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None
