"""
예외 정의

- WebSearchError: 모든 예외의 기본 클래스
- RenderError: 페이지 렌더링(네비게이션, 타임아웃, HTTP 에러) 실패
- ParseError: 렌더링된 DOM을 읽을 수 없는 경우
- StorageError: 캐시 저장소 읽기/쓰기 실패
- ValidationError: 필수 입력 누락 또는 잘못된 값
"""

from typing import Optional


class WebSearchError(RuntimeError):
    """websearch 패키지 예외 기본 클래스"""


class RenderError(WebSearchError):
    """페이지 렌더링 실패

    빈 페이지가 정상적으로 로드된 경우와 구분하기 위해 사용한다.
    """

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"페이지 렌더링 실패: {url} - {reason}")


class ParseError(WebSearchError):
    """DOM 파싱 실패

    선택자에 매칭되는 결과가 없는 것은 에러가 아니다 (빈 목록 반환).
    """


class StorageError(WebSearchError):
    """캐시 저장소 에러"""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        self.operation = operation
        self.cause = cause
        message = f"캐시 저장소 에러 ({operation})"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ValidationError(WebSearchError, ValueError):
    """입력 검증 실패"""
