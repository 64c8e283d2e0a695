# Extractors Package
"""페이지 콘텐츠 추출기"""

from websearch.extractors.content_extractor import ContentExtractor

__all__ = [
    "ContentExtractor",
]
