from typing import Any, Optional
from pydantic import EmailStr, Field, model_validator
from storefront.common.models import ApiModel
from storefront.user.models import UserProfile


class LoginIn(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterIn(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)


class AuthOut(ApiModel):
    """
    Login/register answer. Either {"token": .., "user": {..}} or the user fields
    flattened next to the token.
    """
    token: Optional[str] = None
    user: UserProfile

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_user(cls, data: Any) -> Any:
        if isinstance(data, dict) and "user" not in data:
            user = {k: v for k, v in data.items() if k not in ("token", "type", "tokenType")}
            return {"token": data.get("token"), "user": user}
        return data
