# routers/deps.py
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from core.errors import NotFoundError
from db.database import get_db
from services.catalog_service import PlantCatalog
from services.plant_store import PlantRecordStore


def get_store(db: Session = Depends(get_db)) -> PlantRecordStore:
    return PlantRecordStore(db)


def get_catalog(request: Request) -> PlantCatalog:
    return request.app.state.catalog


def parse_id(value: str, what: str = "Plant") -> UUID:
    """
    パスの id を UUID にする。
    形式が不正なものも「見つからない」として扱う
    """
    try:
        return UUID(value)
    except ValueError:
        raise NotFoundError(f"{what} not found")
