"""
Order listing engine.

The listing state lives in an immutable `ListingSession`. The functions in
this module take a session and return a new one; `OrderListing` holds the
current session and is the only thing that talks to the store.

A cursor is only meaningful for the filters it was fetched under, so every
filter change goes through `reset_for_filters`, which drops the cursor and
bumps `generation`. Batches planned under an older generation are discarded
when they arrive.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Callable, List, Literal, Optional, Sequence, Tuple

import pandas as pd

from ..config import get_config
from ..data.interface import OrderStore
from ..data.models import (
    DateFilter,
    OrderListFilters,
    OrderRecord,
    PageCursor,
    Predicate,
    SortSpec,
    StatusFilter,
)
from ..exceptions import FetchFailed, StoreError
from ..logging import get_logger

HasMorePolicy = Literal["non_empty", "full_page"]

ORDER_BY = SortSpec(field="date", descending=True)


@dataclass(frozen=True)
class ListingSession:
    """Filters, pagination state and accumulated rows of one listing session."""
    filters: OrderListFilters = field(default_factory=OrderListFilters)
    cursor: Optional[PageCursor] = None
    has_more: bool = True
    accumulated: Tuple[OrderRecord, ...] = ()
    search_text: str = ""
    error: Optional[FetchFailed] = None
    generation: int = 0
    # True once a first page has landed under the current generation
    primed: bool = False

    @property
    def visible(self) -> List[OrderRecord]:
        """Accumulated rows, narrowed by the current client-side search."""
        return narrow(self.accumulated, self.search_text)


@dataclass(frozen=True)
class FetchRequest:
    """A fully built page query, tagged with the session generation it belongs to."""
    generation: int
    load_more: bool
    predicates: Tuple[Predicate, ...]
    order_by: SortSpec
    limit: int
    start_after: Optional[PageCursor] = None


# ---------- query building ----------

def date_lower_bound(date_filter: DateFilter, now: datetime) -> Optional[datetime]:
    """Earliest order date admitted by `date_filter`, or None for "all"."""
    if date_filter == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_filter == "week":
        return now - timedelta(days=7)
    if date_filter == "month":
        # Calendar month; the day is clamped when the previous month is shorter
        return (pd.Timestamp(now) - pd.DateOffset(months=1)).to_pydatetime()
    return None


def build_predicates(filters: OrderListFilters, now: datetime) -> Tuple[Predicate, ...]:
    predicates = []
    if filters.status != "all":
        predicates.append(Predicate(field="delivery_status", op="==", value=filters.status))
    bound = date_lower_bound(filters.date_range, now)
    if bound is not None:
        predicates.append(Predicate(field="date", op=">=", value=bound))
    return tuple(predicates)


def plan_fetch(session: ListingSession, load_more: bool, page_size: int, now: datetime) -> FetchRequest:
    """Build the store query for the next fetch of `session`.

    A continuation is only planned once the current generation has a first
    page. Before that, `load_more` degrades to a fresh fetch that replaces the
    accumulated rows.
    """
    load_more = load_more and session.primed
    return FetchRequest(
        generation=session.generation,
        load_more=load_more,
        predicates=build_predicates(session.filters, now),
        order_by=ORDER_BY,
        limit=page_size,
        start_after=session.cursor if load_more else None,
    )


# ---------- session transitions ----------

def apply_batch(
    session: ListingSession,
    request: FetchRequest,
    batch: Sequence[OrderRecord],
    policy: HasMorePolicy = "non_empty",
) -> ListingSession:
    """Fold a fetched page into the session.

    A batch from a superseded generation leaves the session as it is.
    """
    if request.generation != session.generation:
        return session

    batch = tuple(batch)
    accumulated = session.accumulated + batch if request.load_more else batch
    if policy == "full_page":
        has_more = len(batch) >= request.limit
    else:
        has_more = bool(batch)

    cursor = session.cursor
    if batch:
        last = batch[-1]
        cursor = PageCursor(last_id=last.id, last_sort_value=last.date)

    return replace(session, accumulated=accumulated, has_more=has_more, cursor=cursor, error=None, primed=True)


def apply_failure(session: ListingSession, request: FetchRequest, error: FetchFailed) -> ListingSession:
    """Record a failed fetch; accumulated rows and cursor are kept."""
    if request.generation != session.generation:
        return session
    return replace(session, error=error)


def reset_for_filters(
    session: ListingSession,
    status: Optional[StatusFilter] = None,
    date_range: Optional[DateFilter] = None,
) -> ListingSession:
    """Start a new pagination session under (possibly) new filters.

    The accumulated rows stay until the fresh first page replaces them, so a
    failing refetch still leaves the previous rows on screen.
    """
    filters = OrderListFilters(
        status=session.filters.status if status is None else status,
        date_range=session.filters.date_range if date_range is None else date_range,
    )
    return replace(
        session,
        filters=filters,
        cursor=None,
        has_more=True,
        search_text="",
        error=None,
        generation=session.generation + 1,
        primed=False,
    )


def matches_search(order: OrderRecord, text: str) -> bool:
    needle = text.lower()
    return (
        needle in order.invoice_number.lower()
        or needle in order.customer.name.lower()
        or needle in order.customer.email.lower()
    )


def narrow(records: Sequence[OrderRecord], text: str) -> List[OrderRecord]:
    """Case-insensitive substring search over already fetched rows."""
    if not text:
        return list(records)
    return [order for order in records if matches_search(order, text)]


def client_search(session: ListingSession, text: str) -> ListingSession:
    """Narrow the visible rows without touching the store or the cursor.

    Only rows that have already been fetched can match.
    """
    return replace(session, search_text=text)


# ---------- controller ----------

class OrderListing:
    """Stateful driver for a listing session against an OrderStore."""

    def __init__(
        self,
        store: OrderStore,
        page_size: Optional[int] = None,
        has_more_policy: Optional[HasMorePolicy] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        config = get_config()
        self.store = store
        self.page_size = page_size or config.page_size
        self.has_more_policy = has_more_policy or config.has_more_policy
        self.clock = clock
        self.logger = get_logger(__name__)
        self.session = ListingSession()

    @property
    def orders(self) -> List[OrderRecord]:
        return self.session.visible

    @property
    def has_more(self) -> bool:
        return self.session.has_more

    @property
    def error(self) -> Optional[FetchFailed]:
        return self.session.error

    def fetch(self, load_more: bool = False) -> ListingSession:
        request = plan_fetch(self.session, load_more, self.page_size, self.clock())
        self.logger.debug(
            f"Fetching orders (load_more={load_more}, filters={self.session.filters.model_dump(mode='json')})"
        )
        try:
            batch = self.store.query_orders(
                request.predicates,
                request.order_by,
                request.limit,
                start_after=request.start_after,
            )
        except StoreError as e:
            self.logger.error(f"Error fetching orders: {e}")
            self.session = apply_failure(self.session, request, FetchFailed(extra={"cause": e.detail}))
            return self.session

        if request.generation != self.session.generation:
            self.logger.debug(f"Discarding stale page from generation {request.generation}")
        self.session = apply_batch(self.session, request, batch, self.has_more_policy)
        return self.session

    def load_more(self) -> ListingSession:
        if not self.session.has_more:
            return self.session
        if not self.session.primed:
            self.logger.debug("No first page for the current filters yet; fetching from the top")
        return self.fetch(load_more=True)

    def change_filter(
        self,
        status: Optional[StatusFilter] = None,
        date_range: Optional[DateFilter] = None,
    ) -> ListingSession:
        self.session = reset_for_filters(self.session, status=status, date_range=date_range)
        return self.fetch()

    def refresh(self) -> ListingSession:
        return self.change_filter()

    def client_search(self, text: str) -> List[OrderRecord]:
        self.session = client_search(self.session, text)
        return self.session.visible
