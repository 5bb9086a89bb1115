# ============================================================================
# KuCoin REST Client v1.0.0
# Pagination Cursor
# ============================================================================
#
# Purpose: Decodes the paginated data shape and iterates pages lazily
#
# Paginated Wire Shape:
#   {"currentPage": 1, "pageSize": 50, "totalNum": 120, "totalPage": 3,
#    "items": [...]}
#
# Invariants:
#   - total_page == ceil(total_num / page_size) whenever page_size > 0
#   - current_page > total_page yields an empty item list, never an error
#
# ============================================================================

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from kucoin_rest.envelope import validate_shape
from kucoin_rest.errors import DecodeError
from kucoin_rest.request_builder import QueryParams

logger = logging.getLogger(__name__)


DEFAULT_PAGE_SIZE = 50


@dataclass(frozen=True)
class PaginationParam:
    """Page request; writes currentPage/pageSize into the query parameters."""

    current_page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.current_page < 1:
            raise ValueError(f"current_page must be >= 1, got: {self.current_page}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got: {self.page_size}")

    def read_param(self, params: QueryParams) -> QueryParams:
        params.set("currentPage", self.current_page)
        params.set("pageSize", self.page_size)
        return params

    def next(self) -> "PaginationParam":
        return replace(self, current_page=self.current_page + 1)


class _PaginatedWire(BaseModel):
    model_config = ConfigDict(extra="ignore")

    current_page: int = Field(alias="currentPage", ge=1)
    page_size: int = Field(alias="pageSize", ge=0)
    total_num: int = Field(alias="totalNum", ge=0)
    total_page: int = Field(default=0, alias="totalPage", ge=0)
    items: Optional[List[Any]] = None


def total_pages(total_num: int, page_size: int) -> int:
    """ceil(total_num / page_size) in integer arithmetic."""
    if page_size <= 0:
        return 0
    return -(-total_num // page_size)


@dataclass
class PaginationPage:
    """
    One decoded page. items holds the raw JSON objects; decode them on
    demand with read_items().
    """

    current_page: int
    page_size: int
    total_num: int
    total_page: int
    items: List[Any] = field(default_factory=list)
    raw: bytes = field(default=b"", repr=False)

    @classmethod
    def from_data(cls, data: Any, payload: Optional[bytes] = None) -> "PaginationPage":
        """
        Build a page from an envelope's data member.

        Raises:
            DecodeError: If data does not have the paginated shape
        """
        try:
            wire = _PaginatedWire.model_validate(data)
        except ValidationError as e:
            logger.error(f"[KC-DEC-001] Not a paginated payload | errors={e.error_count()}")
            raise DecodeError(
                f"Payload is not a paginated result: {e}",
                payload=payload if payload is not None else data,
            ) from e

        total_page = wire.total_page
        if wire.page_size > 0:
            derived = total_pages(wire.total_num, wire.page_size)
            if derived != wire.total_page:
                logger.warning(
                    f"[KC-PAGE] totalPage mismatch, using derived value | "
                    f"server={wire.total_page} | derived={derived} | "
                    f"total_num={wire.total_num} | page_size={wire.page_size}"
                )
            total_page = derived

        items = list(wire.items or [])
        if wire.current_page > total_page:
            items = []

        return cls(
            current_page=wire.current_page,
            page_size=wire.page_size,
            total_num=wire.total_num,
            total_page=total_page,
            items=items,
            raw=payload or b"",
        )

    def read_items(self, shape) -> list:
        """Decode the items as List[shape]."""
        return validate_shape(List[shape], self.items, self.raw or None)

    def has_next(self) -> bool:
        return self.current_page < self.total_page

    def next_param(self) -> PaginationParam:
        return PaginationParam(
            current_page=self.current_page + 1,
            page_size=self.page_size or DEFAULT_PAGE_SIZE,
        )


def iterate_pages(
    fetch: Callable[[PaginationParam], PaginationPage],
    start: Optional[PaginationParam] = None
) -> Iterator[PaginationPage]:
    """
    Lazily fetch pages from start until total_page is reached.

    fetch re-invokes the same logical call for a given page; the caller must
    keep every other filter (time windows especially) fixed. The generator is
    single-use.
    """
    param = start or PaginationParam()
    while True:
        page = fetch(param)
        yield page
        if not page.has_next() or not page.items:
            return
        param = param.next()
