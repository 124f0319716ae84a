"""Page-based listing over a RecordStore."""

import math
from typing import Any, Dict, Optional

from infrastructure.models import PaginatedData, Pagination
from infrastructure.persistence.store import Predicate, RecordStore

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def paginate(
    store: RecordStore,
    where: Optional[Dict[str, Any]] = None,
    predicate: Optional[Predicate] = None,
    sort_by: Optional[str] = "created_at",
    descending: bool = True,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> PaginatedData:
    """Return one page of matching records plus the pagination block.

    `page` is 1-based. `limit` is clamped to [1, MAX_PAGE_SIZE].
    """
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    total = store.count(where=where, predicate=predicate)
    items = store.find(
        where=where,
        predicate=predicate,
        sort_by=sort_by,
        descending=descending,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return PaginatedData(
        data=items,
        pagination=Pagination(
            total=total, page=page, limit=limit, pages=math.ceil(total / limit)
        ),
    )
