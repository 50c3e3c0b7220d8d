"""
Dynamic query builder shared by every entity service.

``build_query`` validates the paging request before anything touches the
database, narrows the entity set through the filter collaborator, orders
it by a sort field resolved at runtime from the entity's column table,
and slices out the requested page.  ``run_query`` executes the result.
"""
from sqlalchemy import Select, asc, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from emr.exceptions import (
    PAGE_NUMBER_INVALID,
    PAGE_SIZE_INVALID,
    SORT_ORDER_INVALID,
    ApplicationError,
)
from emr.fields import resolve_column
from emr.filtering import apply_filter
from emr.schemas import FilterCriterion


# LIMIT / OFFSET bind as signed 64-bit integers.
MAX_ROW_OFFSET = 2**63 - 1


def validate_paging(page_number: int, page_size: int) -> int:
    """Check the paging request and return the number of rows to skip."""
    if page_size < 1 or page_size > MAX_ROW_OFFSET:
        raise ApplicationError(PAGE_SIZE_INVALID)
    if page_number < 1:
        raise ApplicationError(PAGE_NUMBER_INVALID)
    skip = (page_number - 1) * page_size
    if skip > MAX_ROW_OFFSET:
        raise ApplicationError(PAGE_NUMBER_INVALID)
    return skip


def _order_expression(model, sort_field: str, sort_order: str | None):
    column = resolve_column(model, sort_field)
    if column is None:
        raise ApplicationError(f"Invalid sort field '{sort_field}'")
    direction = (sort_order or "").strip().lower()
    if direction == "asc":
        return asc(column)
    if direction == "desc":
        return desc(column)
    raise ApplicationError(SORT_ORDER_INVALID)


def build_query(
    model,
    filters: list[FilterCriterion] | None = None,
    search_term: str | None = None,
    page_number: int = 1,
    page_size: int = 10,
    sort_field: str | None = None,
    sort_order: str | None = "asc",
) -> Select:
    """Return a SELECT over *model* narrowed, ordered and paginated per the arguments."""
    skip = validate_paging(page_number, page_size)
    stmt = apply_filter(select(model), model, filters, search_term)
    if sort_field:
        stmt = stmt.order_by(_order_expression(model, sort_field, sort_order))
    return stmt.offset(skip).limit(page_size)


async def run_query(db: AsyncSession, stmt: Select) -> list:
    result = await db.execute(stmt)
    return list(result.scalars().all())
