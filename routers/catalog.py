# routers/catalog.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from auth.deps import get_current_user
from core.errors import NotFoundError, ValidationError
from routers.deps import get_catalog
from schemas.catalog import CatalogDetail, CatalogMatch, CatalogSummary
from schemas.common import DataResponse
from services.catalog_service import PlantCatalog

logger = logging.getLogger(__name__)

# ログイン必須だけどユーザー自体は使わない
router = APIRouter(tags=["Catalog"], dependencies=[Depends(get_current_user)])


def _fallback_names(match: CatalogMatch) -> List[str]:
    """
    学名 -> 一般名（先頭）の順で検索に使う名前を返す
    """
    names = []
    if match.scientific_name:
        names.append(match.scientific_name)
    if match.common_names and match.common_names[0].strip():
        names.append(match.common_names[0].strip())
    return names


@router.get("/search", response_model=DataResponse[List[CatalogSummary]])
def search(
    q: Optional[str] = Query(None),
    provider: str = Query("perenual", pattern="^(perenual|plantnet)$"),
    catalog: PlantCatalog = Depends(get_catalog),
):
    query = (q or "").strip()
    if not query:
        raise ValidationError("Missing search query")

    if provider == "plantnet":
        results = catalog.search_species(query)
    else:
        results = catalog.search_by_name(query)
    return {"data": results}


@router.get("/info/{catalog_id}", response_model=DataResponse[CatalogDetail])
def info(catalog_id: int, catalog: PlantCatalog = Depends(get_catalog)):
    return {"data": catalog.fetch_by_id(catalog_id)}


@router.post("/identify", response_model=DataResponse[CatalogSummary])
def identify(
    file: Optional[UploadFile] = File(None),
    catalog: PlantCatalog = Depends(get_catalog),
):
    """
    画像から植物を判定して、カタログの検索結果（1件）を返す
    """
    if file is None:
        raise ValidationError("No image uploaded")

    image = file.file.read()
    if not image:
        raise ValidationError("No image uploaded")

    match = catalog.identify_from_image(
        image,
        filename=file.filename or "image.jpg",
        content_type=file.content_type or "image/jpeg",
    )
    if match is None:
        raise NotFoundError("No matching plant found")

    for name in _fallback_names(match):
        results = catalog.search_by_name(name)
        if results:
            return {"data": results[0]}
        logger.info("no catalog entry for %r, trying next name", name)

    raise NotFoundError("No matching plant found")
