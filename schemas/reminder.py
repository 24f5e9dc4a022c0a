# schemas/reminder.py
from pydantic import ConfigDict, Field, model_validator
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from enum import Enum

from schemas.common import CamelModel


class ReminderType(str, Enum):
    """リマインダーの種別（固定）"""
    WATER = "water"
    FERTILIZE = "fertilize"
    PRUNE = "prune"
    REPOT = "repot"


class Reminder(CamelModel):
    """
    植物にぶら下がるリマインダー（サブドキュメント）
    next_due は常に計算で決まる値で、直接セットしない
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    type: ReminderType
    frequency: int = Field(gt=0)
    last_completed: Optional[datetime] = None
    next_due: datetime
    history: List[datetime] = Field(default_factory=list)


class ReminderCreate(CamelModel):
    type: ReminderType
    frequency: int = Field(gt=0, strict=True)


class ReminderUpdate(CamelModel):
    type: Optional[ReminderType] = None
    frequency: Optional[int] = Field(default=None, gt=0, strict=True)

    @model_validator(mode="after")
    def _require_change(self):
        if self.type is None and self.frequency is None:
            raise ValueError("type or frequency is required")
        return self


class ReminderPatch(ReminderUpdate):
    """一括更新の1件分（対象 id 付き）"""
    id: UUID


class ReminderBatch(CamelModel):
    add: List[ReminderCreate] = Field(default_factory=list)
    remove: List[UUID] = Field(default_factory=list)
    update: List[ReminderPatch] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.add or self.remove or self.update)
