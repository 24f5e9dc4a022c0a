# services/plant_store.py
"""
植物ドキュメントの永続化

1植物 = plants テーブルの1行。リマインダーは JSON 配列として同じ行に持つので、
update_partial の1回の呼び出しは「1行を1回書く」だけになる
（ロック -> 変換 -> UPDATE -> commit）
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import PersistenceError
from core.timeutil import utcnow
from models.plant import Plant
from schemas.plant import PlantRecord
from schemas.reminder import Reminder, ReminderCreate, ReminderPatch
from services import reminder_engine

logger = logging.getLogger(__name__)


@dataclass
class PlantMutation:
    """
    部分更新の指定。None / 空のフィールドは何もしない。
    適用順は set_name -> remove -> add -> update -> complete
    """
    set_name: Optional[str] = None
    add_reminders: List[ReminderCreate] = field(default_factory=list)
    remove_reminder_ids: List[UUID] = field(default_factory=list)
    update_reminders: List[ReminderPatch] = field(default_factory=list)
    complete_reminder_ids: List[UUID] = field(default_factory=list)

    def touches_reminders(self) -> bool:
        return bool(
            self.add_reminders
            or self.remove_reminder_ids
            or self.update_reminders
            or self.complete_reminder_ids
        )


@dataclass
class UpdateResult:
    matched_count: int
    modified_count: int
    plant: Optional[PlantRecord] = None
    added: List[Reminder] = field(default_factory=list)
    updated: List[Reminder] = field(default_factory=list)
    completed: List[Reminder] = field(default_factory=list)
    removed_ids: List[UUID] = field(default_factory=list)
    unmatched_update_ids: List[UUID] = field(default_factory=list)


# -------------------------
# row <-> record
# -------------------------
def load_reminders(raw) -> List[Reminder]:
    return [Reminder.model_validate(item) for item in (raw or [])]


def dump_reminders(reminders: List[Reminder]) -> list:
    return [r.model_dump(mode="json") for r in reminders]


def to_record(row: Plant) -> PlantRecord:
    return PlantRecord(
        id=row.plant_id,
        owner=row.user_id,
        name=row.name,
        catalog_id=row.catalog_id,
        info=row.info,
        added_at=row.added_at,
        reminders=load_reminders(row.reminders),
    )


class PlantRecordStore:
    """
    (plant_id, owner) で絞った植物ドキュメントの読み書き。
    他人の植物と存在しない植物は呼び出し側から区別できない
    """

    def __init__(self, db: Session):
        self.db = db

    def _owned(self, plant_id: UUID, owner: str):
        return self.db.query(Plant).filter(
            Plant.plant_id == plant_id,
            Plant.user_id == owner,
        )

    def find_by_owner(self, owner: str) -> List[PlantRecord]:
        rows = (
            self.db.query(Plant)
            .filter(Plant.user_id == owner)
            .order_by(Plant.added_at)
            .all()
        )
        return [to_record(row) for row in rows]

    def find_one(self, plant_id: UUID, owner: str) -> Optional[PlantRecord]:
        row = self._owned(plant_id, owner).first()
        return to_record(row) if row else None

    def insert(
        self,
        owner: str,
        name: str,
        info: Optional[dict] = None,
        catalog_id: Optional[str] = None,
        added_at: Optional[datetime] = None,
    ) -> PlantRecord:
        row = Plant(
            user_id=owner,
            name=name,
            catalog_id=catalog_id,
            info=info,
            added_at=added_at or utcnow(),
            reminders=[],
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("plant insert failed owner=%s: %s", owner, e)
            raise PersistenceError()

        return to_record(row)

    def update_partial(
        self,
        plant_id: UUID,
        owner: str,
        mutation: PlantMutation,
        now: Optional[datetime] = None,
    ) -> UpdateResult:
        now = now or utcnow()

        try:
            # Postgres では行ロック。sqlite では無視される
            row = self._owned(plant_id, owner).with_for_update().first()
            if row is None:
                self.db.rollback()
                return UpdateResult(matched_count=0, modified_count=0)

            modified = False
            result = UpdateResult(matched_count=1, modified_count=0)

            if mutation.set_name is not None and mutation.set_name != row.name:
                row.name = mutation.set_name
                modified = True

            if mutation.touches_reminders():
                reminders = load_reminders(row.reminders)

                merge = reminder_engine.batch_merge(
                    reminders,
                    now,
                    add=mutation.add_reminders,
                    remove=mutation.remove_reminder_ids,
                    update=mutation.update_reminders,
                )
                reminders, completed = reminder_engine.complete_many(
                    merge.reminders, mutation.complete_reminder_ids, now
                )

                result.added = merge.added
                result.removed_ids = merge.removed_ids
                result.updated = merge.updated
                result.unmatched_update_ids = merge.unmatched_update_ids
                result.completed = completed

                if merge.changed or completed:
                    # JSON 列は新しいリストを代入しないと変更検知されない
                    row.reminders = dump_reminders(reminders)
                    modified = True

            if modified:
                self.db.commit()
                self.db.refresh(row)
            else:
                self.db.rollback()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("plant update failed plant_id=%s: %s", plant_id, e)
            raise PersistenceError()

        result.modified_count = 1 if modified else 0
        result.plant = to_record(row)
        return result

    def delete(self, plant_id: UUID, owner: str) -> int:
        try:
            deleted = self._owned(plant_id, owner).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("plant delete failed plant_id=%s: %s", plant_id, e)
            raise PersistenceError()
        return deleted
