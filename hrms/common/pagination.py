"""Page/sort query parameters and the ``{"data", "meta"}`` list envelope."""

from typing import Any, Generic, Optional, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import Select, func, inspect
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


class PaginationParams:
    """List-endpoint dependency: ``pagination: PaginationParams = Depends()``."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
        sort: Optional[str] = Query(None, description="Column name, '-' prefix for descending"),
    ) -> None:
        self.page = page
        self.page_size = page_size
        self.sort = sort

    @property
    def offset(self) -> int:
        return self.page_size * (self.page - 1)

    def order_clause(self, model: Any):
        """ORDER BY term for ``sort`` on *model*, or None when it names no column."""
        if not self.sort or model is None:
            return None
        name = self.sort.removeprefix("-")
        if name not in inspect(model).columns:
            return None
        column = getattr(model, name)
        return column.desc() if self.sort.startswith("-") else column.asc()


class PaginationMeta(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PaginatedResponse(BaseModel, Generic[T]):
    data: Sequence[T]
    meta: PaginationMeta


def build_meta(total: int, page: int, page_size: int) -> PaginationMeta:
    # Ceiling division; zero rows means zero pages
    pages = -(-total // page_size)
    return PaginationMeta(
        page=page,
        page_size=page_size,
        total=total,
        total_pages=pages,
        has_next=page < pages,
        has_prev=page > 1,
    )


async def paginate(
    session: AsyncSession,
    query: Select,
    params: PaginationParams,
    *,
    model: Any = None,
    schema: Optional[type[BaseModel]] = None,
) -> PaginatedResponse:
    """Run one COUNT and one LIMIT/OFFSET select for *query*.

    A valid ``params.sort`` replaces the query's own ordering. Rows are
    validated into *schema* when one is given.
    """
    ordering = params.order_clause(model)
    if ordering is not None:
        query = query.order_by(None).order_by(ordering)

    total = await session.scalar(
        query.order_by(None).with_only_columns(func.count(), maintain_column_froms=True),
    )
    result = await session.scalars(query.limit(params.page_size).offset(params.offset))
    rows = result.all()

    return PaginatedResponse(
        data=[schema.model_validate(row) for row in rows] if schema else list(rows),
        meta=build_meta(total or 0, params.page, params.page_size),
    )
