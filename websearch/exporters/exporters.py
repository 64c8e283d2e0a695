"""
Exporter 클래스 구현

- 캐시된 검색 결과를 JSON 및 CSV 형식으로 내보내기
- 문자열 직렬화(serialize)와 파일 저장(export) 지원
"""

import csv
import io
import json
import os
from abc import ABC, abstractmethod
from typing import List

from websearch.errors import ValidationError
from websearch.models.data_models import SearchResultRecord
from websearch.storage.cache import format_timestamp


def _record_row(record: SearchResultRecord) -> dict:
    """내보내기용 행 (저장 형식의 시각 사용)"""
    return {
        "query": record.query,
        "url": record.url,
        "title": record.title,
        "snippet": record.snippet,
        "search_engine": record.search_engine.value,
        "timestamp": format_timestamp(record.created_at)
    }


class BaseExporter(ABC):
    """내보내기 기본 클래스"""

    @abstractmethod
    def serialize(self, records: List[SearchResultRecord]) -> str:
        """검색 결과 목록을 문자열로 직렬화"""
        pass

    @abstractmethod
    def get_extension(self) -> str:
        """파일 확장자 반환"""
        pass

    def export(self, records: List[SearchResultRecord], filepath: str) -> str:
        """검색 결과 목록을 파일로 내보내기

        Args:
            records: 내보낼 검색 결과 목록
            filepath: 저장할 파일 경로 (확장자 없으면 추가)

        Returns:
            저장된 파일 경로
        """
        extension = self.get_extension()
        if not filepath.endswith(extension):
            filepath = f"{filepath}{extension}"

        dir_path = os.path.dirname(filepath)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        with open(filepath, "w", encoding="utf-8", newline="") as f:
            f.write(self.serialize(records))

        return filepath


class JSONExporter(BaseExporter):
    """JSON 형식 내보내기"""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        """JSONExporter 초기화

        Args:
            indent: JSON 들여쓰기 크기
            ensure_ascii: ASCII 인코딩 강제 여부
        """
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def serialize(self, records: List[SearchResultRecord]) -> str:
        data = [_record_row(record) for record in records]
        return json.dumps(data, ensure_ascii=self.ensure_ascii, indent=self.indent)

    def get_extension(self) -> str:
        return ".json"


class CSVExporter(BaseExporter):
    """CSV 형식 내보내기

    모든 필드를 큰따옴표로 감싸고 내부 큰따옴표는 두 번 쓴다.
    """

    HEADERS = ["Query", "URL", "Title", "Snippet", "Search Engine", "Timestamp"]
    FIELDS = ["query", "url", "title", "snippet", "search_engine", "timestamp"]

    def serialize(self, records: List[SearchResultRecord]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(self.HEADERS)
        for record in records:
            row = _record_row(record)
            writer.writerow([row[field] for field in self.FIELDS])
        return buffer.getvalue().rstrip("\n")

    def get_extension(self) -> str:
        return ".csv"


class ExporterFactory:
    """Exporter 팩토리 클래스"""

    _exporters = {
        "json": JSONExporter,
        "csv": CSVExporter
    }

    @classmethod
    def create(cls, format_type: str, **kwargs) -> BaseExporter:
        """형식에 맞는 Exporter 생성

        Args:
            format_type: 내보내기 형식 ("json" 또는 "csv")
            **kwargs: Exporter 초기화 인자

        Returns:
            생성된 Exporter 인스턴스

        Raises:
            ValidationError: 지원하지 않는 형식인 경우
        """
        format_type = (format_type or "").lower()
        if format_type not in cls._exporters:
            raise ValidationError(f"Unsupported format: {format_type}. Supported: {list(cls._exporters.keys())}")

        return cls._exporters[format_type](**kwargs)

    @classmethod
    def get_supported_formats(cls) -> List[str]:
        """지원하는 형식 목록 반환"""
        return list(cls._exporters.keys())
