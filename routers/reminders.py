# routers/reminders.py
from uuid import UUID

from fastapi import APIRouter, Depends

from auth.deps import get_current_user
from core.errors import NotFoundError
from models.user import User
from routers.deps import get_store, parse_id
from schemas.common import DataResponse, MessageResponse
from schemas.reminder import Reminder, ReminderCreate, ReminderPatch, ReminderUpdate
from services.plant_store import PlantMutation, PlantRecordStore, UpdateResult

router = APIRouter(
    prefix="/plants/{plant_id}/reminders",
    tags=["Reminders"],
)


# -------------------------
# utility
# -------------------------
def _apply(store: PlantRecordStore, plant_id: UUID, user: User, mutation: PlantMutation) -> UpdateResult:
    """
    植物が無い（または他人の植物）なら 404。
    リマインダーが無い場合は modified_count == 0 で返ってくる
    """
    result = store.update_partial(plant_id, user.user_id, mutation)
    if result.matched_count == 0:
        raise NotFoundError("Plant not found")
    return result


# -------------------------
# endpoints
# -------------------------
@router.post("", response_model=DataResponse[Reminder])
def add_reminder(
    plant_id: str,
    data: ReminderCreate,
    store: PlantRecordStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    result = _apply(store, parse_id(plant_id), user, PlantMutation(add_reminders=[data]))
    return {"data": result.added[0]}


@router.put("/{reminder_id}", response_model=DataResponse[Reminder])
def update_reminder(
    plant_id: str,
    reminder_id: str,
    data: ReminderUpdate,
    store: PlantRecordStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    pid = parse_id(plant_id)
    patch = ReminderPatch(
        id=parse_id(reminder_id, "Reminder"),
        type=data.type,
        frequency=data.frequency,
    )
    result = _apply(store, pid, user, PlantMutation(update_reminders=[patch]))
    if not result.updated:
        raise NotFoundError("Reminder not found")
    return {"data": result.updated[0]}


@router.delete("/{reminder_id}", response_model=MessageResponse)
def delete_reminder(
    plant_id: str,
    reminder_id: str,
    store: PlantRecordStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    pid = parse_id(plant_id)
    rid = parse_id(reminder_id, "Reminder")
    result = _apply(store, pid, user, PlantMutation(remove_reminder_ids=[rid]))
    if result.modified_count == 0:
        raise NotFoundError("Reminder not found")
    return {"message": "Reminder deleted"}


@router.post("/{reminder_id}/complete", response_model=DataResponse[Reminder])
def complete_reminder(
    plant_id: str,
    reminder_id: str,
    store: PlantRecordStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    pid = parse_id(plant_id)
    rid = parse_id(reminder_id, "Reminder")
    result = _apply(store, pid, user, PlantMutation(complete_reminder_ids=[rid]))
    if not result.completed:
        raise NotFoundError("Reminder not found")
    return {"data": result.completed[0]}
