from pydantic import field_validator
from datetime import datetime
from typing import Optional

from schemas.common import CamelModel


class UserResponse(CamelModel):
    user_id: str
    has_push_token: bool
    created_at: Optional[datetime] = None


class PushTokenUpdate(CamelModel):
    token: str

    @field_validator("token")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()
