# app/core/security.py

"""
애플리케이션의 보안 관련 유틸리티 함수를 정의하는 모듈입니다.

- 비밀번호 해싱 및 검증 (passlib bcrypt).
- JWT(JSON Web Token) 생성 및 검증 (python-jose).
- Authorization 헤더의 Bearer 토큰 파싱.
- 토큰으로부터 요청의 인증 정보(Identity)를 구성.
"""

import logging
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext  # 비밀번호 해싱을 위한 라이브러리
from fastapi import HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.permissions import role_label
from app.domains.usr import models as usr_models

logger = logging.getLogger(__name__)

CUSTOMER_ROLE_LABEL = "customer"

_BEARER_RE = re.compile(r"^\s*Bearer\s+(.+)\s*$", re.IGNORECASE)


# --- 비밀번호 해싱 설정 ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    일반 텍스트 비밀번호와 해싱된 비밀번호를 비교하여 일치하는지 확인합니다.
    """
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    주어진 비밀번호를 해싱합니다.
    """
    return pwd_context.hash(password)


# =============================================================================
# 인증 정보 (Identity)
# =============================================================================
class Identity(BaseModel):
    """
    인증 단계가 요청에 부여하는 신원 정보입니다.
    권한 검사(authorize)와 핸들러의 회사 범위 검사에 사용되는 유일한 입력입니다.
    """
    user_id: int
    role_id: Optional[int] = None
    company_id: Optional[int] = None
    role: Optional[str] = None  # trim + 소문자로 정규화된 역할명
    issued_at: Optional[int] = None
    expires_at: Optional[int] = None

    @property
    def is_customer(self) -> bool:
        """회사에 소속된 'customer' 역할이면 자기 회사 데이터로 범위가 제한됩니다."""
        return self.role == CUSTOMER_ROLE_LABEL and self.company_id is not None

    @property
    def is_admin_label(self) -> bool:
        return self.role == "admin"

    def scoped_company_id(self, requested: Optional[int] = None) -> Optional[int]:
        """customer 는 항상 자기 회사로 고정되고, 그 외에는 요청값을 그대로 사용합니다."""
        return self.company_id if self.is_customer else requested

    def ensure_company_access(self, company_id: Optional[int]) -> None:
        """customer 가 다른 회사의 레코드에 접근하면 403 을 발생시킵니다."""
        if self.is_customer and company_id != self.company_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


# --- JWT 토큰 생성 및 검증 ---
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Access Token을 생성합니다. 'iat' 와 'exp' 는 자동으로 추가됩니다.
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"iat": now, "exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """서명과 만료를 검증하고 페이로드를 반환합니다. 실패 시 JWTError."""
    return jwt.decode(token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])


def _unauthorized(detail: Any) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def extract_bearer_token(raw_authorization: Optional[str], *, method: str = "", path: str = "") -> str:
    """
    Authorization 헤더에서 토큰을 추출합니다.

    - 'Bearer' 스킴은 대소문자를 구분하지 않으며, 여분의 공백을 허용합니다.
    - 토큰을 감싼 작은따옴표/큰따옴표는 제거합니다.
    - 형식 오류 시 상관관계 ID(errorId)를 담아 401 을 발생시킵니다.
      운영 환경이 아니면 스킴만 노출한 미리보기를 details 로 덧붙입니다. (토큰은 절대 노출하지 않음)
    """
    raw = (raw_authorization or "").strip()
    if not raw:
        raise _unauthorized("Missing Authorization header")

    match = _BEARER_RE.match(raw)
    if not match:
        error_id = str(uuid.uuid4())
        # 원본 헤더는 서버 로그에만 남깁니다.
        logger.warning(
            "Invalid Authorization header format errorId=%s method=%s path=%s raw=%r",
            error_id, method, path, raw,
        )
        parts = raw.split()
        scheme = parts[0] if parts else "<missing-scheme>"
        token_preview = "<redacted>" if len(parts) > 1 else "<missing-token>"
        body: Dict[str, Any] = {"error": "Invalid Authorization header format", "errorId": error_id}
        if not settings.is_production:
            body["details"] = f"Header received: '{scheme} {token_preview}', expected 'Bearer <token>'"
        raise _unauthorized(body)

    token = match.group(1).strip()
    if len(token) >= 2 and token[0] == token[-1] and token[0] in ("'", '"'):
        token = token[1:-1]
    return token


async def get_user_with_role(db: AsyncSession, user_id: int) -> Optional[usr_models.User]:
    """사용자와 역할을 함께 조회합니다."""
    statement = (
        select(usr_models.User)
        .options(selectinload(usr_models.User.role))
        .where(usr_models.User.id == user_id)
    )
    result = await db.execute(statement)
    return result.scalars().first()


async def authenticate_request(
    db: AsyncSession,
    raw_authorization: Optional[str],
    *,
    method: str = "",
    path: str = "",
) -> Identity:
    """
    Bearer 토큰을 검증하고, 저장소에서 현재 사용자/역할을 다시 읽어 Identity 를 구성합니다.
    토큰은 신원의 연속성만 증명하며, 역할과 회사는 항상 최신 레코드를 따릅니다.
    """
    token = extract_bearer_token(raw_authorization, method=method, path=path)

    try:
        payload = decode_access_token(token)
    except JWTError as e:
        logger.info("Token verification failed: %s", e)
        raise _unauthorized("Invalid or expired token")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        user_id = None
    if not user_id:
        raise _unauthorized("Invalid token payload")

    try:
        user = await get_user_with_role(db, user_id)
    except Exception:
        logger.error("User lookup failed during authentication", exc_info=True)
        raise _unauthorized("Invalid or expired token")
    if user is None:
        raise _unauthorized("Invalid token (user not found)")

    return Identity(
        user_id=user.id,
        role_id=user.role_id,
        company_id=user.company_id,
        role=role_label(user.role),
        issued_at=payload.get("iat"),
        expires_at=payload.get("exp"),
    )
