import uuid

from fastapi import Header, Query

from emr.config import settings
from emr.filtering import parse_filters


class QueryParams:
    """
    Reusable FastAPI dependency that parses the list-endpoint query string.

    Usage in a router::

        @router.get("")
        async def list_entities(params: QueryParams = Depends()):
            ...

    Attributes
    ----------
    filters:
        Parsed ``filters`` parameter, a JSON array of
        ``{"PropertyName", "Operator", "Value"}`` objects, or None.
    search_term:
        Free-text term matched against every text column.
    page_number / page_size:
        Passed through unvalidated; the query builder rejects values
        below 1 with its own messages.  ``page_size`` is clamped to
        ``settings.MAX_PAGE_SIZE``.
    sort_field / sort_order:
        Entity field to sort by and ``"asc"`` / ``"desc"``.
    """

    def __init__(
        self,
        filters: str | None = Query(
            None,
            description='Filter criteria: [{"PropertyName": "name", "Operator": "Equal", "Value": "x"}]',
        ),
        search_term: str | None = Query(None, alias="searchTerm"),
        page_number: int = Query(1, alias="pageNumber", description="Page number (1-based)."),
        page_size: int = Query(
            settings.DEFAULT_PAGE_SIZE, alias="pageSize", description="Items per page."
        ),
        sort_field: str | None = Query(None, alias="sortField"),
        sort_order: str = Query("asc", alias="sortOrder", description="'asc' or 'desc'."),
    ) -> None:
        self.raw_filters = filters
        self.search_term = search_term
        self.page_number = page_number
        self.page_size = min(page_size, settings.MAX_PAGE_SIZE)
        self.sort_field = sort_field
        self.sort_order = sort_order

    @property
    def filters(self):
        return parse_filters(self.raw_filters)


class RequestContext:
    """
    Tenant and user of the current request.

    Authentication happens upstream; the gateway forwards the resolved
    identity in ``X-Tenant-Id`` / ``X-User-Id``.
    """

    def __init__(
        self,
        tenant_id: uuid.UUID | None = Header(None, alias="X-Tenant-Id"),
        user_id: uuid.UUID | None = Header(None, alias="X-User-Id"),
    ) -> None:
        self.tenant_id = tenant_id
        self.user_id = user_id
