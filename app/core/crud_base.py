# app/core/crud_base.py

"""
공통 CRUD(Create, Read, Update, Delete) 작업을 위한 기본 클래스 모듈입니다.
모든 메서드는 비동기(async) 환경에서 동작합니다.
"""

from typing import Generic, List, Optional, Type, TypeVar, Any, Dict

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from pydantic import BaseModel

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


async def commit_or_rollback(db: AsyncSession) -> None:
    """
    커밋을 시도하고, 어떤 예외든 발생하면 세션을 롤백한 뒤 다시 발생시킵니다.
    (IntegrityError 는 app.core.errors 의 핸들러가 400 응답으로 변환합니다)
    """
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    모든 CRUD 작업에 대한 기본 클래스를 정의합니다.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """
        ID를 기준으로 단일 레코드를 조회합니다.
        """
        return await db.get(self.model, id)

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: Optional[int] = None, **kwargs: Any
    ) -> List[ModelType]:
        """
        여러 레코드를 id 오름차순으로 조회합니다. 필터링을 위한 키워드 인자를 지원합니다.
        값이 None 인 필터는 무시합니다.
        """
        query = select(self.model)

        for field, value in kwargs.items():
            if value is not None and hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)

        query = query.order_by(self.model.id).offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        return result.scalars().all()

    async def get_by_attribute(
        self, db: AsyncSession, *, attribute: str, value: Any
    ) -> Optional[ModelType]:
        statement = select(self.model).where(getattr(self.model, attribute) == value)
        response = await db.execute(statement)
        return response.scalars().first()

    async def get_one_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Optional[ModelType]:
        """
        조건을 만족하는 레코드가 여러 개 있더라도 첫 번째 것을 반환하며,
        조건을 만족하는 레코드가 전혀 없으면 None을 반환합니다.
        """
        query = select(self.model)
        conditions = []

        if filters:
            for attribute, value in filters.items():
                if hasattr(self.model, attribute):
                    conditions.append(getattr(self.model, attribute) == value)

        if conditions:
            query = query.where(*conditions)

        response = await db.execute(query.order_by(self.model.id))
        return response.scalars().first()

    async def create(self, db: AsyncSession, *, obj_in: CreateSchemaType, **extra: Any) -> ModelType:
        """
        새로운 레코드를 생성합니다. extra 로 스키마에 없는 값(예: created_by_id)을 덧붙일 수 있습니다.
        """
        data = obj_in.model_dump() if isinstance(obj_in, BaseModel) else dict(obj_in)
        data.update(extra)
        db_obj = self.model.model_validate(data)
        db.add(db_obj)
        await commit_or_rollback(db)
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self, db: AsyncSession, *, db_obj: ModelType, obj_in: Any
    ) -> ModelType:
        """
        기존 레코드를 업데이트합니다. obj_in 은 스키마 또는 dict 입니다.
        """
        if isinstance(obj_in, BaseModel):
            update_data = obj_in.model_dump(exclude_unset=True)
        else:
            update_data = dict(obj_in)
        for key, value in update_data.items():
            setattr(db_obj, key, value)

        db.add(db_obj)
        await commit_or_rollback(db)
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, *, id: Any) -> Optional[ModelType]:
        """
        ID를 기준으로 레코드를 삭제합니다.
        """
        db_obj = await db.get(self.model, id)
        if db_obj:
            await db.delete(db_obj)
            await commit_or_rollback(db)
        return db_obj
