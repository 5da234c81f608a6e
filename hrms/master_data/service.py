"""Master-data service — one generic CRUD over every lookup type."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.audit import create_audit_entry
from hrms.common.constants import MASTER_DATA_TYPES
from hrms.common.exceptions import ConflictError, NotFoundException
from hrms.common.filters import apply_search
from hrms.employees.models import Employee
from hrms.master_data.models import MasterDataItem
from hrms.master_data.schemas import MasterDataCreate, MasterDataUpdate


def _check_type(item_type: str) -> None:
    if item_type not in MASTER_DATA_TYPES:
        raise NotFoundException("Master data type", item_type)


class MasterDataService:
    """Async CRUD for master-data items of a given type."""

    @staticmethod
    async def list_items(
        db: AsyncSession,
        item_type: str,
        *,
        include_inactive: bool = True,
        search: Optional[str] = None,
    ) -> Sequence[MasterDataItem]:
        _check_type(item_type)
        query = (
            select(MasterDataItem)
            .where(MasterDataItem.type == item_type)
            .order_by(MasterDataItem.name)
        )
        if not include_inactive:
            query = query.where(MasterDataItem.is_active.is_(True))
        query = apply_search(query, MasterDataItem, search, ["name", "code"])
        return (await db.execute(query)).scalars().all()

    @staticmethod
    async def get_item(db: AsyncSession, item_type: str, item_id: int) -> MasterDataItem:
        _check_type(item_type)
        result = await db.execute(
            select(MasterDataItem).where(
                MasterDataItem.id == item_id,
                MasterDataItem.type == item_type,
            ),
        )
        item = result.scalars().first()
        if item is None:
            raise NotFoundException(item_type, item_id)
        return item

    @staticmethod
    async def _ensure_unique_name(
        db: AsyncSession,
        item_type: str,
        name: str,
        exclude_id: Optional[int] = None,
    ) -> None:
        query = select(MasterDataItem.id).where(
            MasterDataItem.type == item_type,
            func.lower(MasterDataItem.name) == name.lower(),
        )
        if exclude_id is not None:
            query = query.where(MasterDataItem.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise ConflictError("name", name)

    @staticmethod
    async def create_item(
        db: AsyncSession,
        item_type: str,
        data: MasterDataCreate,
        *,
        actor_id: Optional[int] = None,
    ) -> MasterDataItem:
        _check_type(item_type)
        await MasterDataService._ensure_unique_name(db, item_type, data.name)

        item = MasterDataItem(type=item_type, **data.model_dump())
        db.add(item)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type=item_type,
            entity_id=item.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        return item

    @staticmethod
    async def update_item(
        db: AsyncSession,
        item_type: str,
        item_id: int,
        data: MasterDataUpdate,
        *,
        actor_id: Optional[int] = None,
    ) -> MasterDataItem:
        item = await MasterDataService.get_item(db, item_type, item_id)
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return item

        if "name" in changes and changes["name"] != item.name:
            await MasterDataService._ensure_unique_name(
                db, item_type, changes["name"], exclude_id=item.id,
            )

        old_values = {k: getattr(item, k) for k in changes}
        for field, value in changes.items():
            setattr(item, field, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type=item_type,
            entity_id=item.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values=changes,
        )
        return item

    @staticmethod
    async def delete_item(
        db: AsyncSession,
        item_type: str,
        item_id: int,
        *,
        actor_id: Optional[int] = None,
    ) -> None:
        item = await MasterDataService.get_item(db, item_type, item_id)

        in_use = await db.execute(
            select(func.count()).select_from(Employee).where(
                or_(
                    Employee.department_id == item.id,
                    Employee.designation_id == item.id,
                    Employee.location_id == item.id,
                ),
            ),
        )
        if in_use.scalar():
            raise ConflictError(
                "id", item.id, detail=f"{item.name} is assigned to employees and cannot be deleted.",
            )

        await db.delete(item)
        await db.flush()
        await create_audit_entry(
            db,
            action="delete",
            entity_type=item_type,
            entity_id=item_id,
            actor_id=actor_id,
            old_values={"name": item.name},
        )
