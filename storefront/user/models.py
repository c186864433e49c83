from datetime import datetime
from typing import Optional
from pydantic import Field
from storefront.common.models import ApiModel


class UserProfile(ApiModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    active: Optional[bool] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full or self.email


class ProfileUpdateIn(ApiModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)

    model_config = {"extra": "forbid"}
