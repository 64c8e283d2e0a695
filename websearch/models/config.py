"""
SearchConfig - 설정 데이터 모델

- 캐시 DB 경로, TTL
- 렌더러 종류, User-Agent, 네비게이션 타임아웃
- .env / 환경 변수에서 로드
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from websearch.errors import ValidationError


DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# 환경 변수 이름 -> (필드명, 변환 함수)
_ENV_FIELDS = {
    "WEBSEARCH_DB_PATH": ("db_path", str),
    "WEBSEARCH_RENDERER": ("renderer", str),
    "WEBSEARCH_USER_AGENT": ("user_agent", str),
    "WEBSEARCH_TIMEOUT": ("navigation_timeout", float),
    "WEBSEARCH_SEARCH_TTL_HOURS": ("search_cache_ttl_hours", float),
    "WEBSEARCH_CONTENT_TTL_DAYS": ("content_cache_ttl_days", float),
    "WEBSEARCH_LOG_LEVEL": ("log_level", str),
}


@dataclass
class SearchConfig:
    """검색/추출 설정 데이터 모델

    - db_path: SQLite 캐시 파일 경로
    - renderer: "requests" (정적 HTML) 또는 "playwright" (헤드리스 브라우저)
    - navigation_timeout: 페이지 로드 타임아웃 (초)
    - search_cache_ttl_hours: 검색 결과 캐시 유효 시간
    - content_cache_ttl_days: 추출 콘텐츠 캐시 유효 기간
    """
    db_path: str = "./search_cache.db"
    renderer: str = "requests"
    user_agent: str = DEFAULT_USER_AGENT
    navigation_timeout: float = 30.0
    search_cache_ttl_hours: float = 24
    content_cache_ttl_days: float = 7
    log_level: str = "INFO"

    def to_dict(self) -> dict:
        """딕셔너리로 변환"""
        return {
            "db_path": self.db_path,
            "renderer": self.renderer,
            "user_agent": self.user_agent,
            "navigation_timeout": self.navigation_timeout,
            "search_cache_ttl_hours": self.search_cache_ttl_hours,
            "content_cache_ttl_days": self.content_cache_ttl_days,
            "log_level": self.log_level
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SearchConfig":
        """딕셔너리에서 객체 생성"""
        return cls(
            db_path=data.get("db_path", "./search_cache.db"),
            renderer=data.get("renderer", "requests"),
            user_agent=data.get("user_agent", DEFAULT_USER_AGENT),
            navigation_timeout=data.get("navigation_timeout", 30.0),
            search_cache_ttl_hours=data.get("search_cache_ttl_hours", 24),
            content_cache_ttl_days=data.get("content_cache_ttl_days", 7),
            log_level=data.get("log_level", "INFO")
        )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "SearchConfig":
        """.env 파일과 환경 변수에서 설정 로드

        Args:
            env_file: .env 파일 경로. None이면 현재 디렉토리부터 탐색

        Returns:
            환경 변수가 반영된 설정
        """
        load_dotenv(env_file)

        data = {}
        for env_name, (field_name, convert) in _ENV_FIELDS.items():
            raw = os.getenv(env_name)
            if raw is None or raw.strip() == "":
                continue
            try:
                data[field_name] = convert(raw.strip())
            except ValueError:
                raise ValidationError(f"환경 변수 {env_name} 값이 올바르지 않습니다: {raw!r}")
        return cls.from_dict(data)
