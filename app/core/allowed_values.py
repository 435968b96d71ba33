# app/core/allowed_values.py

"""
데이터베이스 CHECK 제약조건으로부터 열거형 컬럼의 허용값 목록을 추출하는 모듈입니다.

쓰기 경로의 검증 로직이 코드에 값을 하드코딩하지 않고 DB 제약조건과 동기화되도록 합니다.
예) CHECK (cylinder_type = ANY (ARRAY['Gas'::text, 'Liquid'::text])) → ["Gas", "Liquid"]

주의: 제약조건 정의 문자열에 대한 정규식 파싱이므로 컬럼명 부분 일치 등 근사치에 의존합니다.
"""

import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from fastapi import HTTPException, status
from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import rollback_quietly

logger = logging.getLogger(__name__)

_ARRAY_RE = re.compile(r"ARRAY\[(.+?)\]")
_QUOTED_RE = re.compile(r"'([^']+)'")
_CAST_RE = re.compile(r"::[a-zA-Z0-9_]+")

FetchConstraintDefinitions = Callable[[AsyncSession, str], Awaitable[Sequence[str]]]

_CHECK_CONSTRAINTS_SQL = text(
    """
    SELECT c.conname AS name, pg_get_constraintdef(c.oid) AS def
    FROM pg_constraint c
    JOIN pg_class t ON t.oid = c.conrelid
    WHERE c.contype = 'c' AND t.relname = :table_name
    """
)


async def fetch_check_constraint_definitions(db: AsyncSession, table_name: str) -> List[str]:
    """PostgreSQL 카탈로그에서 테이블의 CHECK 제약조건 정의 문자열을 조회합니다."""
    result = await db.execute(_CHECK_CONSTRAINTS_SQL, {"table_name": str(table_name)})
    return [row["def"] for row in result.mappings().all()]


def extract_allowed_values(definition: str, column: str) -> Optional[List[str]]:
    """
    제약조건 정의가 컬럼명을 (대소문자 무시) 포함하고 ARRAY[...] 리터럴이 있으면
    그 항목들을 추출합니다. 추출 결과가 비어 있으면 None 을 반환합니다.
    """
    definition = str(definition or "")
    if str(column).lower() not in definition.lower():
        return None
    match = _ARRAY_RE.search(definition)
    if not match or not match.group(1):
        return None

    values = []
    for raw in match.group(1).split(","):
        item = raw.strip()
        quoted = _QUOTED_RE.search(item)
        value = quoted.group(1) if quoted else _CAST_RE.sub("", item)
        if value:
            values.append(value)
    return values or None


def normalize_to_allowed(value: Any, allowed: Optional[Sequence[str]]) -> str:
    """
    입력값을 trim 한 뒤 허용값 목록과 대소문자 무시 비교하여 정식 표기를 반환합니다.
    일치하는 값이 없으면 trim 된 입력을 그대로 반환합니다. (거부 여부는 호출자가 판단)
    """
    candidate = "" if value is None else str(value).strip()
    for allowed_value in allowed or []:
        if str(allowed_value).lower() == candidate.lower():
            return allowed_value
    return candidate


class AllowedValuesResolver:
    """
    `table.column` 키로 허용값 목록을 메모이즈합니다.
    허용값이 발견된 경우에만 캐시하며, 조회 실패는 경고 로그 후 None 으로 처리합니다.
    """

    def __init__(self, fetch_constraint_definitions: FetchConstraintDefinitions = fetch_check_constraint_definitions):
        self._fetch_constraint_definitions = fetch_constraint_definitions
        self._values: Dict[str, List[str]] = {}

    async def get_allowed_values(self, db: AsyncSession, table: str, column: str) -> Optional[List[str]]:
        key = f"{table}.{column}"
        if key in self._values:
            return self._values[key]

        try:
            definitions = await self._fetch_constraint_definitions(db, table)
        except Exception:
            logger.warning("Allowed values lookup failed for %s", key, exc_info=True)
            await rollback_quietly(db)
            return None

        for definition in definitions:
            values = extract_allowed_values(definition, column)
            if values:
                self._values[key] = values
                return values
        return None

    async def ensure_allowed(self, db: AsyncSession, table: str, column: str, value: Any) -> str:
        """
        값을 허용값의 정식 표기로 정규화하여 반환합니다.
        허용값에 없으면 (허용값을 찾지 못한 경우 포함) 400 을 발생시킵니다.
        """
        allowed = await self.get_allowed_values(db, table, column) or []
        normalized = normalize_to_allowed(value, allowed)
        if normalized not in allowed:
            detail = f"Invalid {column}. Allowed: {', '.join(allowed)}" if allowed else f"Invalid {column}"
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
        return normalized

    def clear(self) -> None:
        self._values.clear()
