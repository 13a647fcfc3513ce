from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .orders import DeliveryStatus

DateFilter = Literal["all", "today", "week", "month"]
StatusFilter = Union[Literal["all"], DeliveryStatus]


class OrderListFilters(BaseModel):
    """Server-side filters for the order listing."""
    model_config = ConfigDict(frozen=True)

    status: StatusFilter = Field(default="all", description="'all' or one delivery status")
    date_range: DateFilter = Field(default="all", description="Lower bound on order date")
