"""Pydantic schemas for partner account requests and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from schemas.checkr import CheckrAccountResponse


class AccountCreate(BaseModel):
    """Schema for creating an Account."""

    name: str = Field(min_length=1)


class AccountResponse(BaseModel):
    """Schema for Account response."""

    id: str
    name: str
    created_at: datetime
    checkr_account: Optional[CheckrAccountResponse] = None

    model_config = {"from_attributes": True}
