# Exporters Package
"""검색 결과 내보내기"""

from websearch.exporters.exporters import BaseExporter, JSONExporter, CSVExporter, ExporterFactory

__all__ = [
    "BaseExporter",
    "JSONExporter",
    "CSVExporter",
    "ExporterFactory",
]
