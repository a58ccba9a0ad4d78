"""Pydantic schemas for items"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemCreate(BaseModel):
    """
    New auction item

    closing_time accepts ISO-8601 strings or unix timestamps (seconds or
    milliseconds). Range checks against "now" happen in the service.
    """
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    starting_bid: Decimal = Field(..., ge=0)
    closing_time: datetime
    categories: Optional[List[int]] = None
