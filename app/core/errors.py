# app/core/errors.py

"""
모든 오류 응답을 {"error": <message>} 형태로 통일하는 예외 핸들러 모듈입니다.

- HTTPException: detail 이 문자열이면 {"error": detail}, dict 이면 그대로 본문으로 사용
  (인증 실패 시 errorId / details 를 함께 전달하기 위함)
- RequestValidationError: 400 으로 변환
- IntegrityError: 400 + 사용자 친화적 메시지 (integrity_error_detail)
"""

import logging
import re
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

_PG_KEY_RE = re.compile(r"Key \((?P<cols>[^)]+)\)=")
_PG_NOT_NULL_RE = re.compile(r'null value in column "(?P<col>[^"]+)"')
_SQLITE_COLUMNS_RE = re.compile(r"constraint failed: (?P<cols>.+)$", re.IGNORECASE | re.MULTILINE)


def _strip_table_prefix(columns: str) -> str:
    return ", ".join(part.strip().split(".")[-1] for part in columns.split(","))


def integrity_error_detail(exc: IntegrityError) -> Optional[str]:
    """
    데이터베이스 무결성 오류를 짧은 설명 문자열로 변환합니다.
    (PostgreSQL / SQLite 메시지 형식을 모두 처리)
    """
    message = str(getattr(exc, "orig", None) or exc)
    lowered = message.lower()

    if "unique" in lowered or "duplicate key" in lowered:
        match = _PG_KEY_RE.search(message) or _SQLITE_COLUMNS_RE.search(message)
        if match:
            return f"Unique constraint violated on: {_strip_table_prefix(match.group('cols'))}"
        return "Unique constraint violated"

    if "foreign key" in lowered:
        match = _PG_KEY_RE.search(message)
        if match:
            column = _strip_table_prefix(match.group("cols"))
            return f"{column} does not refer to an existing {column.removesuffix('_id')}"
        return "A referenced record does not exist"

    if "not null" in lowered or "null value" in lowered:
        match = _PG_NOT_NULL_RE.search(message) or _SQLITE_COLUMNS_RE.search(message)
        if match:
            column = match.group("col") if "col" in match.groupdict() else _strip_table_prefix(match.group("cols"))
            return f"Missing required field: {column}"
        return "Missing required field"

    if "check constraint" in lowered:
        return "Check constraint violated"

    return None


def _error_body(detail: Any) -> dict:
    if isinstance(detail, dict):
        return detail
    return {"error": detail}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "; ".join(messages) or "Invalid request"},
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.info("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": integrity_error_detail(exc) or "Constraint violated"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
