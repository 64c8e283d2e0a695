"""
ContentExtractor - 페이지 콘텐츠 추출기

- text: script/style 제거 후 본문 텍스트
- links: 텍스트와 href가 모두 있는 앵커
- images: src가 있는 이미지 (alt 없으면 빈 문자열)
- all: 세 가지를 각각 독립적으로 추출
"""

import logging
from typing import List
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from websearch.models.data_models import ContentBundle, ExtractKind, ImageItem, LinkItem
from websearch.rendering.base import PageRenderer, RenderedPage


logger = logging.getLogger(__name__)


class ContentExtractor:
    """렌더링된 페이지에서 text / links / images 추출

    각 추출은 렌더러가 새로 파싱한 DOM에서 독립적으로 수행된다.
    """

    # 텍스트 추출 전에 제거할 요소
    NOISE_ELEMENTS = ["script", "style", "noscript"]

    def extract(self, renderer: PageRenderer, page: RenderedPage, kind: ExtractKind) -> ContentBundle:
        """요청된 종류의 콘텐츠 추출

        Args:
            renderer: DOM 평가에 사용할 렌더러
            page: 렌더링된 페이지
            kind: 추출 종류

        Returns:
            요청된 항목만 채워진 ContentBundle
        """
        bundle = ContentBundle()

        if kind in (ExtractKind.TEXT, ExtractKind.ALL):
            bundle.text = renderer.evaluate(page, self.extract_text)

        if kind in (ExtractKind.LINKS, ExtractKind.ALL):
            bundle.links = renderer.evaluate(page, lambda soup: self.extract_links(soup, page.url))

        if kind in (ExtractKind.IMAGES, ExtractKind.ALL):
            bundle.images = renderer.evaluate(page, lambda soup: self.extract_images(soup, page.url))

        logger.info(f"콘텐츠 추출 완료: {page.url} ({kind.value}: {', '.join(bundle.keys()) or '없음'})")
        return bundle

    def extract_text(self, soup: BeautifulSoup) -> str:
        """script/style을 제거한 본문 텍스트

        빈 줄은 제거하고 각 줄의 앞뒤 공백을 정리한다.
        """
        for element in soup(self.NOISE_ELEMENTS):
            element.decompose()

        root = soup.body or soup
        raw = root.get_text(separator="\n")
        lines = [line.strip() for line in raw.splitlines()]
        return "\n".join(line for line in lines if line).strip()

    def extract_links(self, soup: BeautifulSoup, base_url: str = "") -> List[LinkItem]:
        """링크 추출

        텍스트가 비었거나 href가 비어 있는 앵커는 제외한다.
        """
        links: List[LinkItem] = []
        for anchor in soup.select("a[href]"):
            text = anchor.get_text().strip()
            href = (anchor.get("href") or "").strip()
            if not text or not href:
                continue
            links.append(LinkItem(text=text, url=urljoin(base_url, href) if base_url else href))
        return links

    def extract_images(self, soup: BeautifulSoup, base_url: str = "") -> List[ImageItem]:
        """이미지 추출 (alt 유무와 관계없이 모두 포함)"""
        images: List[ImageItem] = []
        for image in soup.select("img[src]"):
            src = (image.get("src") or "").strip()
            if base_url and src:
                src = urljoin(base_url, src)
            images.append(ImageItem(alt=image.get("alt") or "", src=src))
        return images
