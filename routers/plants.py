import logging
from typing import List

from fastapi import APIRouter, Depends

from auth.deps import get_current_user
from core.errors import NotFoundError
from models.user import User
from routers.deps import get_catalog, get_store, parse_id
from schemas.common import DataResponse, MessageResponse
from schemas.plant import PlantCreate, PlantRecord, PlantUpdate
from services.catalog_service import PlantCatalog
from services.plant_store import PlantMutation, PlantRecordStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/plants",
    tags=["Plants"],
)


def build_mutation(data: PlantUpdate) -> PlantMutation:
    """PUT /plants/{id} の body を PlantMutation に変換する"""
    mutation = PlantMutation(set_name=data.name)
    if data.reminders is not None:
        mutation.add_reminders = list(data.reminders.add)
        mutation.remove_reminder_ids = list(data.reminders.remove)
        mutation.update_reminders = list(data.reminders.update)
    return mutation


@router.get("", response_model=DataResponse[List[PlantRecord]])
def list_plants(
    store: PlantRecordStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return {"data": store.find_by_owner(user.user_id)}


@router.post("", response_model=DataResponse[PlantRecord], status_code=201)
def create_plant(
    data: PlantCreate,
    store: PlantRecordStore = Depends(get_store),
    catalog: PlantCatalog = Depends(get_catalog),
    user: User = Depends(get_current_user),
):
    """
    カタログ id から植物を追加する。
    カタログ情報はこの時点のものをスナップショットとして保存する
    """
    info = catalog.fetch_by_id(data.id)
    name = (data.name or "").strip() or info.common_name or f"Plant {data.id}"

    plant = store.insert(
        owner=user.user_id,
        name=name,
        info=info.model_dump(mode="json", by_alias=True),
        catalog_id=str(data.id),
    )
    return {"data": plant}


@router.get("/{plant_id}", response_model=DataResponse[PlantRecord])
def get_plant(
    plant_id: str,
    store: PlantRecordStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    plant = store.find_one(parse_id(plant_id), user.user_id)
    if plant is None:
        raise NotFoundError("Plant not found")
    return {"data": plant}


@router.put("/{plant_id}", response_model=DataResponse[PlantRecord])
def update_plant(
    plant_id: str,
    data: PlantUpdate,
    store: PlantRecordStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    """
    name の変更とリマインダーの一括変更（add / remove / update）。
    全部まとめて1回の書き込みで反映する
    """
    result = store.update_partial(parse_id(plant_id), user.user_id, build_mutation(data))
    if result.matched_count == 0:
        raise NotFoundError("Plant not found")

    if result.unmatched_update_ids:
        logger.warning(
            "plant %s: ignored updates for unknown reminders %s",
            plant_id,
            [str(rid) for rid in result.unmatched_update_ids],
        )

    return {"data": result.plant}


@router.delete("/{plant_id}", response_model=MessageResponse)
def delete_plant(
    plant_id: str,
    store: PlantRecordStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    deleted = store.delete(parse_id(plant_id), user.user_id)
    if deleted == 0:
        raise NotFoundError("Plant not found")
    return {"message": "Plant deleted"}
