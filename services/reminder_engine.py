# services/reminder_engine.py
"""
リマインダー配列に対する純粋な変換ロジック

- DB や時計には触らない（now は呼び出し側から渡す）
- 既存の配列は書き換えず、常に新しい配列 / 新しい Reminder を返す
- next_due は必ずここで再計算する（外から直接セットしない）
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple
from uuid import UUID, uuid4

from core.errors import NotFoundError, ValidationError
from schemas.reminder import Reminder, ReminderCreate, ReminderPatch, ReminderType


@dataclass
class MergeResult:
    """batch_merge の結果"""
    reminders: List[Reminder]
    added: List[Reminder] = field(default_factory=list)
    removed_ids: List[UUID] = field(default_factory=list)
    updated: List[Reminder] = field(default_factory=list)
    # 一括処理開始時に存在しなかった / 同じ batch で消された id
    unmatched_update_ids: List[UUID] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed_ids or self.updated)


# -------------------------
# helpers
# -------------------------
def compute_next_due(anchor: datetime, frequency: int) -> datetime:
    return anchor + timedelta(days=frequency)


def _validate_type(value) -> ReminderType:
    try:
        return ReminderType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in ReminderType)
        raise ValidationError(f"type must be one of: {allowed}")


def _validate_frequency(value) -> int:
    # bool は int のサブクラスなので弾く
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError("frequency must be a positive number of days")
    return value


def find_reminder(reminders: Sequence[Reminder], reminder_id: UUID) -> Optional[Reminder]:
    return next((r for r in reminders if r.id == reminder_id), None)


def _replace(reminders: Sequence[Reminder], updated: Reminder) -> List[Reminder]:
    return [updated if r.id == updated.id else r for r in reminders]


# -------------------------
# single operations
# -------------------------
def new_reminder(frequency: int, type, now: datetime) -> Reminder:
    """
    新しいリマインダーを作る。
    last_completed は常に None（一括追加でも同じ）
    """
    rtype = _validate_type(type)
    freq = _validate_frequency(frequency)

    return Reminder(
        id=uuid4(),
        type=rtype,
        frequency=freq,
        last_completed=None,
        next_due=compute_next_due(now, freq),
        history=[],
    )


def add_reminder(
    reminders: Sequence[Reminder], frequency: int, type, now: datetime
) -> Tuple[List[Reminder], Reminder]:
    reminder = new_reminder(frequency, type, now)
    return [*reminders, reminder], reminder


def update_reminder(
    reminders: Sequence[Reminder],
    reminder_id: UUID,
    now: datetime,
    type=None,
    frequency: Optional[int] = None,
) -> Tuple[List[Reminder], Reminder]:
    """
    type / frequency を差し替えて next_due を now 基準で取り直す
    （更新するとカウントダウンはリセットされる）。
    history と last_completed は触らない
    """
    current = find_reminder(reminders, reminder_id)
    if current is None:
        raise NotFoundError("Reminder not found")

    rtype = current.type if type is None else _validate_type(type)
    freq = current.frequency if frequency is None else _validate_frequency(frequency)

    updated = current.model_copy(update={
        "type": rtype,
        "frequency": freq,
        "next_due": compute_next_due(now, freq),
    })
    return _replace(reminders, updated), updated


def remove_reminder(
    reminders: Sequence[Reminder], reminder_id: UUID
) -> Tuple[List[Reminder], bool]:
    """見つからなくても例外にはしない（呼び出し側が removed=False で判断する）"""
    remaining = [r for r in reminders if r.id != reminder_id]
    return remaining, len(remaining) != len(reminders)


def complete_reminder(
    reminders: Sequence[Reminder], reminder_id: UUID, now: datetime
) -> Tuple[List[Reminder], Reminder]:
    current = find_reminder(reminders, reminder_id)
    if current is None:
        raise NotFoundError("Reminder not found")

    completed = current.model_copy(update={
        "last_completed": now,
        "history": [*current.history, now],
        "next_due": compute_next_due(now, current.frequency),
    })
    return _replace(reminders, completed), completed


# -------------------------
# batch operations
# -------------------------
def batch_merge(
    reminders: Sequence[Reminder],
    now: datetime,
    add: Iterable[ReminderCreate] = (),
    remove: Iterable[UUID] = (),
    update: Iterable[ReminderPatch] = (),
) -> MergeResult:
    """
    remove -> add -> update の順に適用する。

    update の対象は「batch 開始前から存在し、今回 remove されなかった」
    リマインダーだけ。今回 add したものや存在しない id は
    unmatched_update_ids に入れて何もしない
    """
    remove_ids = set(remove)
    original_ids = {r.id for r in reminders}

    # remove
    merged = [r for r in reminders if r.id not in remove_ids]
    removed_ids = [r.id for r in reminders if r.id in remove_ids]

    # add
    added = [new_reminder(item.frequency, item.type, now) for item in add]
    merged.extend(added)

    # update
    updatable = original_ids - remove_ids
    updated: List[Reminder] = []
    unmatched: List[UUID] = []
    for patch in update:
        if patch.id not in updatable:
            unmatched.append(patch.id)
            continue
        merged, reminder = update_reminder(
            merged, patch.id, now, type=patch.type, frequency=patch.frequency
        )
        updated.append(reminder)

    return MergeResult(
        reminders=merged,
        added=added,
        removed_ids=removed_ids,
        updated=updated,
        unmatched_update_ids=unmatched,
    )


def complete_many(
    reminders: Sequence[Reminder], reminder_ids: Iterable[UUID], now: datetime
) -> Tuple[List[Reminder], List[Reminder]]:
    """存在する id だけ完了にする。完了できたものを返す"""
    current = list(reminders)
    completed: List[Reminder] = []
    for rid in reminder_ids:
        if find_reminder(current, rid) is None:
            continue
        current, reminder = complete_reminder(current, rid, now)
        completed.append(reminder)
    return current, completed


def due_reminders(reminders: Sequence[Reminder], start: datetime, end: datetime) -> List[Reminder]:
    """next_due が [start, end) に入っているもの"""
    return [r for r in reminders if start <= r.next_due < end]
