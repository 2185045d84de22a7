"""
Value types describing a record query.

A QuerySpec is produced by the ArchiveQueryPlanner and executed by
ContentStore.query. Filters are keyed by name so that a later stage can
replace a filter (e.g. the calendar view's "from now on" date filter is
replaced by a day range when the grouping engine re-queries).
"""

import dataclasses
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


# Comparison operators understood by the query executor
COMPARE_OPERATORS = ("=", "!=", ">", ">=", "<", "<=", "BETWEEN", "EXISTS")

# Value casts: CHAR compares stored text, DATE compares the calendar day
# (first ten characters of a canonical date-time)
CASTS = ("CHAR", "DATETIME", "DATE")

# Derived columns a grouping clause may select
GROUPING_COLUMNS = ("day", "location_name", "location_sort_name")


@dataclass(frozen=True)
class FieldFilter:
    """Row filter on one named field value."""

    field: str
    compare: str = "="
    value: Any = None
    cast: str = "CHAR"

    def __post_init__(self):
        if self.compare not in COMPARE_OPERATORS:
            raise ValueError(f"Unsupported compare operator: {self.compare}")
        if self.cast not in CASTS:
            raise ValueError(f"Unsupported cast: {self.cast}")
        if self.compare == "BETWEEN" and (
            not isinstance(self.value, (list, tuple)) or len(self.value) != 2
        ):
            raise ValueError("BETWEEN needs a (low, high) pair")


@dataclass(frozen=True)
class GroupingClause:
    """
    Raw grouping override merged into the final query.

    Turns the query into a probe: one row per distinct value of group_by,
    carrying only the selected derived columns.
    """

    fields: Tuple[str, ...]
    group_by: str

    def __post_init__(self):
        for name in self.fields + (self.group_by,):
            if name not in GROUPING_COLUMNS:
                raise ValueError(f"Unsupported grouping column: {name}")


@dataclass
class QuerySpec:
    """Everything the content store needs to run one listing query."""

    record_types: Tuple[str, ...] = ("event",)
    statuses: Tuple[str, ...] = ("published",)
    order_by: List[Tuple[str, str]] = field(default_factory=list)
    filters: Dict[str, FieldFilter] = field(default_factory=dict)
    page: int = 1
    page_size: Optional[int] = None
    ignore_sticky: bool = True
    clauses: Optional[GroupingClause] = None
    language: Optional[str] = None
    filter_term: Optional[str] = None
    search: Optional[str] = None
    view: Optional[str] = None

    def replace(self, **changes) -> "QuerySpec":
        """Copy of this spec with some attributes replaced."""
        changes.setdefault("filters", dict(self.filters))
        changes.setdefault("order_by", list(self.order_by))
        return dataclasses.replace(self, **changes)

    def with_filters(self, **filters: FieldFilter) -> "QuerySpec":
        """Copy of this spec with filters added or replaced by key."""
        merged = dict(self.filters)
        merged.update(filters)
        return self.replace(filters=merged)

    def ungrouped(self) -> "QuerySpec":
        """Copy without pagination and without the grouping clause."""
        return self.replace(page=1, page_size=None, clauses=None)

    @property
    def is_grouped(self) -> bool:
        return self.clauses is not None


@dataclass
class ProbeRow:
    """One row of a grouped probe query (one per bucket)."""

    day: Optional[str] = None
    location_name: Optional[str] = None
    location_sort_name: Optional[str] = None


@dataclass
class QueryResult:
    """Page of records (or probe rows) plus pagination totals."""

    items: List[Any]
    total: int
    page: int = 1
    page_size: Optional[int] = None

    @property
    def max_pages(self) -> int:
        if not self.page_size:
            return 1 if self.total else 0
        return math.ceil(self.total / self.page_size)
