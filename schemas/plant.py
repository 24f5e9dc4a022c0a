from pydantic import Field, field_validator, model_validator
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from schemas.common import CamelModel
from schemas.reminder import Reminder, ReminderBatch


class PlantRecord(CamelModel):
    """ストアが返す植物ドキュメント（レスポンスにもそのまま使う）"""
    id: UUID
    owner: str
    name: str
    catalog_id: Optional[str] = None
    info: Optional[Dict[str, Any]] = None
    added_at: datetime
    reminders: List[Reminder] = Field(default_factory=list)


class PlantCreate(CamelModel):
    """POST /plants の body。id はカタログ（Perenual）の id"""
    id: int = Field(gt=0)
    name: Optional[str] = None


class PlantUpdate(CamelModel):
    name: Optional[str] = None
    reminders: Optional[ReminderBatch] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @model_validator(mode="after")
    def _require_change(self):
        if self.name is None and (self.reminders is None or self.reminders.is_empty()):
            raise ValueError("name or reminders is required")
        return self
