from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Predicate(BaseModel):
    """A single server-side filter clause."""
    model_config = ConfigDict(frozen=True)

    field: str = Field(description="Record field the clause applies to")
    op: Literal["==", ">="] = Field(description="Equality, or lower bound on a timestamp field")
    value: Any = Field(description="Comparison value")


class SortSpec(BaseModel):
    """Sort order for a paged query."""
    model_config = ConfigDict(frozen=True)

    field: str = Field(default="date", description="Sort key")
    descending: bool = Field(default=True, description="Sort direction")


class PageCursor(BaseModel):
    """Continuation token pointing at the last record of a fetched page.

    Only meaningful for the predicates and sort it was produced under.
    """
    model_config = ConfigDict(frozen=True)

    last_id: str = Field(description="Identifier of the last record on the page")
    last_sort_value: datetime = Field(description="Sort key value of that record")
