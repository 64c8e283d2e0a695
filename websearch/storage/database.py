"""
CacheDatabase - SQLite 캐시 DB 핸들

- 명시적 open / close 수명 주기
- 버전 기반 마이그레이션 (PRAGMA user_version)
- 각 마이그레이션 단계는 스키마 상태를 확인 후 적용 (재실행해도 안전)
"""

import logging
import os
import sqlite3
from typing import Callable, List, Optional, Set, Tuple

from websearch.errors import StorageError


logger = logging.getLogger(__name__)


def _table_columns(conn: sqlite3.Connection, table: str) -> Set[str]:
    """테이블의 컬럼 이름 집합 반환 (테이블이 없으면 빈 집합)"""
    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return {row[1] for row in rows}


def _create_search_results(conn: sqlite3.Connection) -> None:
    """search_results 기본 테이블 생성"""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS search_results (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            query TEXT NOT NULL,
            url TEXT NOT NULL,
            title TEXT,
            snippet TEXT,
            timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(query, url)
        )
    """)


# 검색 엔진 / 필터 컬럼 (이전 버전 DB에는 없음)
_SEARCH_FILTER_COLUMNS: List[Tuple[str, str]] = [
    ("search_engine", "TEXT DEFAULT 'duckduckgo'"),
    ("site_filter", "TEXT"),
    ("file_type", "TEXT"),
    ("date_range", "TEXT"),
]


def _add_search_filter_columns(conn: sqlite3.Connection) -> None:
    """search_results에 엔진 / 필터 컬럼 추가"""
    existing = _table_columns(conn, "search_results")
    for column, ddl in _SEARCH_FILTER_COLUMNS:
        if column in existing:
            continue
        conn.execute(f"ALTER TABLE search_results ADD COLUMN {column} {ddl}")
        logger.info(f"컬럼 추가: search_results.{column}")


def _create_extracted_content(conn: sqlite3.Connection) -> None:
    """extracted_content 테이블 생성"""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS extracted_content (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            url TEXT NOT NULL UNIQUE,
            content TEXT,
            content_type TEXT,
            title TEXT,
            timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)


def _create_indexes(conn: sqlite3.Connection) -> None:
    """조회용 인덱스 생성"""
    conn.execute("CREATE INDEX IF NOT EXISTS idx_query ON search_results(query)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_timestamp ON search_results(timestamp)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_search_engine ON search_results(search_engine)")


# (버전, 이름, 적용 함수) - 버전 순서대로 적용
MIGRATIONS: List[Tuple[int, str, Callable[[sqlite3.Connection], None]]] = [
    (1, "create_search_results", _create_search_results),
    (2, "add_search_filter_columns", _add_search_filter_columns),
    (3, "create_extracted_content", _create_extracted_content),
    (4, "create_indexes", _create_indexes),
]

SCHEMA_VERSION = MIGRATIONS[-1][0]


class CacheDatabase:
    """SQLite 캐시 DB 핸들

    전역 상태 대신 이 객체를 SearchCache에 전달하여 사용한다.
    """

    def __init__(self, path: str = "./search_cache.db"):
        """CacheDatabase 초기화

        Args:
            path: DB 파일 경로. ":memory:"이면 메모리 DB
        """
        self.path = path
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        """열린 연결 반환

        Raises:
            StorageError: DB가 열려 있지 않은 경우
        """
        if self._conn is None:
            raise StorageError("connection", RuntimeError("DB가 열려 있지 않습니다."))
        return self._conn

    def open(self) -> "CacheDatabase":
        """DB 연결 및 마이그레이션 적용

        Returns:
            self (체이닝용)

        Raises:
            StorageError: 연결 또는 마이그레이션 실패 시
        """
        if self._conn is not None:
            return self

        if self.path != ":memory:":
            dir_path = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(dir_path, exist_ok=True)

        try:
            conn = sqlite3.connect(self.path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
        except sqlite3.Error as e:
            logger.error(f"DB 연결 실패: {self.path} - {e}")
            raise StorageError("open", e)

        self._conn = conn
        try:
            self.migrate()
        except StorageError:
            self.close()
            raise

        logger.info(f"캐시 DB 열림: {self.path} (schema v{self.schema_version()})")
        return self

    def schema_version(self) -> int:
        """현재 스키마 버전 반환"""
        try:
            return self.connection.execute("PRAGMA user_version").fetchone()[0]
        except sqlite3.Error as e:
            raise StorageError("schema_version", e)

    def migrate(self) -> List[str]:
        """미적용 마이그레이션을 버전 순서대로 적용

        Returns:
            적용된 마이그레이션 이름 목록
        """
        applied = []
        current = self.schema_version()

        for version, name, step in MIGRATIONS:
            if version <= current:
                continue
            try:
                with self.connection:
                    step(self.connection)
                    self.connection.execute(f"PRAGMA user_version = {version}")
            except sqlite3.Error as e:
                logger.error(f"마이그레이션 실패: v{version} {name} - {e}")
                raise StorageError(f"migrate:{name}", e)
            applied.append(name)
            logger.debug(f"마이그레이션 적용: v{version} {name}")

        return applied

    def close(self) -> None:
        """DB 연결 종료"""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug(f"캐시 DB 닫힘: {self.path}")

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
