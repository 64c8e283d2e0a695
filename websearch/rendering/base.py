"""
PageRenderer 추상 클래스 및 RenderedPage

- render(url): 페이지를 가져와 DOM 핸들(RenderedPage) 반환
- evaluate(page, fn): DOM에서 구조화 데이터 추출
- close(): 리소스 정리
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from bs4 import BeautifulSoup

from websearch.errors import ParseError


logger = logging.getLogger(__name__)


@dataclass
class RenderedPage:
    """렌더링된 페이지 (DOM 핸들)

    - url: 리다이렉트 이후 최종 URL (상대 링크 해석 기준)
    - html: 렌더링된 HTML
    - title: 문서 제목
    """
    url: str
    html: str
    title: str = ""

    def soup(self) -> BeautifulSoup:
        """매번 새로 파싱한 DOM 반환 (호출자가 자유롭게 수정 가능)"""
        return BeautifulSoup(self.html, "lxml")


def read_title(soup: BeautifulSoup) -> str:
    """<title> 텍스트 반환"""
    if soup.title and soup.title.string:
        return soup.title.string.strip()
    if soup.title:
        return soup.title.get_text(strip=True)
    return ""


class PageRenderer(ABC):
    """페이지 렌더러 추상 클래스

    구현체는 설정 가능한 User-Agent와 네비게이션 타임아웃을 지원해야 하며,
    실패 시 RenderError를 발생시킨다 (빈 페이지는 실패가 아님).
    """

    @abstractmethod
    def render(self, url: str) -> RenderedPage:
        """페이지 렌더링

        Args:
            url: 대상 URL

        Returns:
            RenderedPage

        Raises:
            RenderError: 네비게이션, 타임아웃, HTTP 에러 시
        """
        pass

    def evaluate(self, page: RenderedPage, extractor: Callable[[BeautifulSoup], Any]) -> Any:
        """렌더링된 DOM에 추출 함수 적용

        Args:
            page: 렌더링된 페이지
            extractor: BeautifulSoup을 받아 구조화 데이터를 반환하는 함수

        Returns:
            추출 함수의 반환값

        Raises:
            ParseError: DOM을 읽을 수 없는 경우
        """
        try:
            soup = page.soup()
        except Exception as e:
            raise ParseError(f"DOM 파싱 실패: {page.url} - {e}")
        return extractor(soup)

    @property
    @abstractmethod
    def name(self) -> str:
        """렌더러 이름"""
        pass

    def close(self) -> None:
        """리소스 정리"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
