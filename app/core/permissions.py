# app/core/permissions.py

"""
역할(Role) → 모듈(Module) 접근 권한을 메모리에 캐싱하는 모듈입니다.

- PermissionCache: 활성화된 role_modules 매핑과 모듈명 → 모듈 ID 조회표를 한 번에 적재합니다.
  명시적으로 clear() 되기 전까지는 저장소를 다시 조회하지 않습니다.
- AdminRoleResolver: role id 가 관리자 역할인지 여부를 메모이즈합니다.

두 캐시 모두 main.py(컴포지션 루트)에서 생성되어 app.state 에 보관되며,
저장소 조회 함수는 생성자 인자로 주입됩니다. (테스트에서는 가짜 조회 함수를 주입)
"""

import logging
import math
from datetime import datetime, UTC
from typing import Any, Awaitable, Callable, Dict, FrozenSet, NamedTuple, Optional, Sequence, Set

from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import rollback_quietly

logger = logging.getLogger(__name__)

ADMIN_ROLE_LABELS = frozenset({"admin", "administrator"})

FetchActiveRoleModules = Callable[[AsyncSession], Awaitable[Sequence[Any]]]
FetchRole = Callable[[AsyncSession, int], Awaitable[Optional[Any]]]


def role_label(role: Any) -> Optional[str]:
    """
    역할 레코드의 표시 이름(name, 없으면 role)을 trim + 소문자로 정규화하여 반환합니다.
    """
    if role is None:
        return None
    raw = getattr(role, "name", None) or getattr(role, "role", None)
    if not raw or not isinstance(raw, str):
        return None
    return raw.strip().lower()


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_number(text: str) -> Optional[Any]:
    """
    숫자 형태의 문자열("12", " 7 ", "5.0", "1e1")을 숫자로 변환합니다.
    정수값이면 int, 아니면 float 를 반환하고, 숫자가 아니거나 nan/inf 이면 None 입니다.
    """
    if not text.strip():
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


class PermissionSnapshot(NamedTuple):
    """한 번의 적재 결과. 교체는 항상 스냅샷 단위로 이루어집니다."""
    by_role: Dict[int, FrozenSet[int]]
    module_name_to_id: Dict[str, int]
    last_loaded: Optional[datetime]


_EMPTY_SNAPSHOT = PermissionSnapshot(by_role={}, module_name_to_id={}, last_loaded=None)


class PermissionCache:
    """
    역할별 접근 가능 모듈 ID 집합과 모듈명 조회표를 보관하는 캐시입니다.

    적재 중 예외가 발생하면 이전 스냅샷을 그대로 유지하고 로그만 남깁니다.
    (빈 캐시보다 오래된 캐시가 낫다는 정책)
    """

    def __init__(self, fetch_active_role_modules: FetchActiveRoleModules):
        self._fetch_active_role_modules = fetch_active_role_modules
        self._snapshot: PermissionSnapshot = _EMPTY_SNAPSHOT

    @property
    def snapshot(self) -> PermissionSnapshot:
        return self._snapshot

    @property
    def is_loaded(self) -> bool:
        return self._snapshot.last_loaded is not None

    async def load(self, db: AsyncSession, force: bool = False) -> PermissionSnapshot:
        """
        활성 role_modules 행(모듈 포함)을 조회하여 캐시를 통째로 재구성합니다.
        이미 적재되어 있고 force 가 False 이면 아무 것도 하지 않습니다.
        """
        if self.is_loaded and not force:
            return self._snapshot

        try:
            rows = await self._fetch_active_role_modules(db)
        except Exception:
            logger.error("Permission cache load failed; keeping previous cache", exc_info=True)
            await rollback_quietly(db)
            return self._snapshot

        by_role: Dict[int, Set[int]] = {}
        module_name_to_id: Dict[str, int] = {}
        for row in rows:
            role_id = _to_int(row.role_id)
            module_id = _to_int(row.module_id)
            if role_id is None or module_id is None:
                continue
            by_role.setdefault(role_id, set()).add(module_id)

            module = getattr(row, "module", None)
            if module is not None:
                name = getattr(module, "name", None) or getattr(module, "module", None)
                if name:
                    module_name_to_id[str(name).lower()] = module_id

        # 단일 대입으로 교체: 읽는 쪽은 절반만 재구성된 상태를 볼 수 없음
        self._snapshot = PermissionSnapshot(
            by_role={rid: frozenset(mids) for rid, mids in by_role.items()},
            module_name_to_id=module_name_to_id,
            last_loaded=datetime.now(UTC),
        )
        logger.info("Permission cache loaded: %d roles, %d module names", len(by_role), len(module_name_to_id))
        return self._snapshot

    def clear(self) -> None:
        """캐시를 비웁니다. 다음 조회 시 저장소에서 다시 적재합니다."""
        self._snapshot = _EMPTY_SNAPSHOT

    async def get_role_permissions(self, db: AsyncSession, role_id: Any) -> Set[int]:
        """
        역할이 접근 가능한 모듈 ID 집합의 복사본을 반환합니다.
        role_id 가 비어 있으면 캐시를 적재하지 않고 빈 집합을 반환합니다.
        """
        if not role_id:
            return set()
        await self.load(db)
        key = _to_int(role_id)
        if key is None:
            return set()
        return set(self._snapshot.by_role.get(key, frozenset()))

    async def resolve_module_identifier(self, db: AsyncSession, identifier: Any) -> Optional[Any]:
        """
        모듈 식별자(숫자 ID 또는 모듈명)를 모듈 ID 로 변환합니다.

        - 숫자 또는 숫자 형태의 문자열: 캐시 조회 없이 그대로 숫자로 반환
        - 그 외 문자열: 캐시 적재 후 소문자 모듈명으로 조회, 없으면 None
        """
        if isinstance(identifier, bool):
            return None
        if not identifier and identifier != 0:
            return None
        if isinstance(identifier, (int, float)):
            return identifier
        text = str(identifier)
        number = _as_number(text)
        if number is not None:
            return number

        await self.load(db)
        return self._snapshot.module_name_to_id.get(text.lower()) or None


class AdminRoleResolver:
    """
    role id → 관리자 여부(bool)를 메모이즈합니다.
    역할 이름 변경은 프로세스 수명 동안 반영되지 않습니다. (clear() 호출 시 제외)
    """

    def __init__(self, fetch_role: FetchRole):
        self._fetch_role = fetch_role
        self._flags: Dict[int, bool] = {}

    async def is_admin_role(self, db: AsyncSession, role_id: Any) -> bool:
        if not role_id:
            return False
        key = _to_int(role_id)
        if key is None:
            return False
        if key in self._flags:
            return self._flags[key]

        try:
            role = await self._fetch_role(db, key)
        except Exception:
            # 확인할 수 없는 역할은 관리자로 취급하지 않으며, 결과도 기억하지 않습니다.
            logger.error("Admin role lookup failed for role_id=%s", key, exc_info=True)
            await rollback_quietly(db)
            return False

        is_admin = role_label(role) in ADMIN_ROLE_LABELS
        self._flags[key] = is_admin
        return is_admin

    def clear(self) -> None:
        self._flags.clear()
