"""
데이터 모델 정의

- SearchEngine / DateRange / ExtractKind: 입력 열거형
- SearchResult: 검색 결과 페이지에서 파싱된 제목, URL, snippet
- SearchResultRecord: 캐시에 저장되는 검색 결과 레코드
- ContentBundle: 페이지에서 추출한 text / links / images 묶음
- ExtractedContentRecord: 캐시에 저장되는 추출 콘텐츠 레코드
- BulkSearchEntry: 일괄 검색의 쿼리별 결과
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple
import json

from websearch.errors import ValidationError


class _ValueEnum(Enum):
    """문자열 값으로 생성 가능한 Enum"""

    @classmethod
    def parse(cls, value):
        """문자열 또는 Enum 값을 Enum 멤버로 변환

        Raises:
            ValidationError: 지원하지 않는 값인 경우
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower():
                    return member
        supported = [member.value for member in cls]
        raise ValidationError(f"지원하지 않는 {cls.__name__} 값: {value!r} (지원: {supported})")

    @classmethod
    def parse_optional(cls, value):
        """None 또는 빈 문자열은 None으로 변환"""
        if value is None or value == "":
            return None
        return cls.parse(value)


class SearchEngine(_ValueEnum):
    """검색 엔진"""
    DUCKDUCKGO = "duckduckgo"
    GOOGLE = "google"
    BING = "bing"


class DateRange(_ValueEnum):
    """검색 기간 필터"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ExtractKind(_ValueEnum):
    """콘텐츠 추출 종류"""
    TEXT = "text"
    LINKS = "links"
    IMAGES = "images"
    ALL = "all"

    def covers(self, requested: "ExtractKind") -> bool:
        """이 종류로 추출한 묶음이 요청된 종류를 포함하는지 여부"""
        return self is ExtractKind.ALL or self is requested


@dataclass
class SearchResult:
    """검색 결과 데이터 모델

    - 검색 결과 페이지의 결과 컨테이너 하나에서 추출한 값
    """
    url: str
    title: str
    snippet: str = ""

    def to_dict(self) -> dict:
        """딕셔너리로 변환"""
        return {
            "url": self.url,
            "title": self.title,
            "snippet": self.snippet
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SearchResult":
        """딕셔너리에서 객체 생성"""
        return cls(
            url=data["url"],
            title=data["title"],
            snippet=data.get("snippet", "")
        )


@dataclass
class SearchResultRecord:
    """캐시된 검색 결과 레코드

    - (query, url) 쌍이 유일 키
    - 같은 (query, url)로 다시 저장하면 기존 행을 대체
    """
    query: str
    url: str
    title: str
    snippet: str
    search_engine: SearchEngine
    created_at: datetime
    site_filter: Optional[str] = None
    file_type: Optional[str] = None
    date_range: Optional[DateRange] = None

    def to_dict(self) -> dict:
        """딕셔너리로 변환"""
        return {
            "query": self.query,
            "url": self.url,
            "title": self.title,
            "snippet": self.snippet,
            "search_engine": self.search_engine.value,
            "site_filter": self.site_filter,
            "file_type": self.file_type,
            "date_range": self.date_range.value if self.date_range else None,
            "created_at": self.created_at.isoformat()
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SearchResultRecord":
        """딕셔너리에서 객체 생성"""
        return cls(
            query=data["query"],
            url=data["url"],
            title=data.get("title", ""),
            snippet=data.get("snippet", ""),
            search_engine=SearchEngine.parse(data.get("search_engine", "duckduckgo")),
            created_at=datetime.fromisoformat(data["created_at"]),
            site_filter=data.get("site_filter"),
            file_type=data.get("file_type"),
            date_range=DateRange.parse_optional(data.get("date_range"))
        )


@dataclass
class LinkItem:
    """추출된 링크"""
    text: str
    url: str


@dataclass
class ImageItem:
    """추출된 이미지"""
    alt: str
    src: str


@dataclass
class ContentBundle:
    """추출 콘텐츠 묶음

    요청된 종류의 키만 채워진다. 채워지지 않은 항목은 None.
    """
    text: Optional[str] = None
    links: Optional[List[LinkItem]] = None
    images: Optional[List[ImageItem]] = None

    def to_dict(self) -> dict:
        """딕셔너리로 변환 (None인 항목은 제외)"""
        data = {}
        if self.text is not None:
            data["text"] = self.text
        if self.links is not None:
            data["links"] = [{"text": link.text, "url": link.url} for link in self.links]
        if self.images is not None:
            data["images"] = [{"alt": image.alt, "src": image.src} for image in self.images]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ContentBundle":
        """딕셔너리에서 객체 생성"""
        links = None
        if "links" in data:
            links = [LinkItem(text=item["text"], url=item["url"]) for item in data["links"]]
        images = None
        if "images" in data:
            images = [ImageItem(alt=item.get("alt", ""), src=item["src"]) for item in data["images"]]
        return cls(text=data.get("text"), links=links, images=images)

    def to_json(self) -> str:
        """JSON 문자열로 직렬화 (저장용)"""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "ContentBundle":
        """JSON 문자열에서 역직렬화"""
        return cls.from_dict(json.loads(json_str or "{}"))

    def keys(self) -> List[str]:
        """채워진 항목 이름 목록"""
        return list(self.to_dict().keys())

    def restrict(self, kind: "ExtractKind") -> "ContentBundle":
        """요청 종류의 항목만 남긴 새 묶음 반환 (ALL이면 그대로)"""
        if kind is ExtractKind.ALL:
            return self
        if kind is ExtractKind.TEXT:
            return ContentBundle(text=self.text)
        if kind is ExtractKind.LINKS:
            return ContentBundle(links=self.links)
        return ContentBundle(images=self.images)


@dataclass
class ExtractedContentRecord:
    """캐시된 추출 콘텐츠 레코드

    - url이 유일 키
    - 다시 추출하면 요청 종류와 관계없이 묶음 전체를 대체
    """
    url: str
    content: ContentBundle
    content_type: ExtractKind
    title: str
    created_at: datetime

    def to_dict(self) -> dict:
        """딕셔너리로 변환"""
        return {
            "url": self.url,
            "content": self.content.to_dict(),
            "content_type": self.content_type.value,
            "title": self.title,
            "created_at": self.created_at.isoformat()
        }


@dataclass
class BulkSearchEntry:
    """일괄 검색의 쿼리별 결과

    results와 error 중 하나만 의미가 있다.
    """
    query: str
    results: List[SearchResultRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def count(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict:
        """딕셔너리로 변환"""
        data = {"query": self.query, "count": self.count}
        if self.error is not None:
            data["error"] = self.error
        else:
            data["results"] = [r.to_dict() for r in self.results]
        return data


@dataclass
class ClearCacheResult:
    """캐시 정리 결과"""
    search_results_removed: int = 0
    content_removed: int = 0

    @property
    def total(self) -> int:
        return self.search_results_removed + self.content_removed


@dataclass
class SearchAnalytics:
    """검색 기록 통계"""
    days_back: int
    total_results: int = 0
    unique_queries: int = 0
    engine_counts: Dict[str, int] = field(default_factory=dict)
    top_queries: List[Tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        """딕셔너리로 변환"""
        return {
            "days_back": self.days_back,
            "total_results": self.total_results,
            "unique_queries": self.unique_queries,
            "engine_counts": dict(self.engine_counts),
            "top_queries": [{"query": q, "count": c} for q, c in self.top_queries]
        }
