# services/perenual_client.py
"""
Perenual（植物データベース）API クライアント
レスポンスはアプリ側の CatalogSummary / CatalogDetail に正規化して返す
"""
import logging
from typing import Any, Dict, List

import httpx
from pydantic import ValidationError as SchemaError

from core.errors import UpstreamError
from schemas.catalog import CatalogDetail, CatalogSummary

logger = logging.getLogger(__name__)


# -------------------------
# normalize
# -------------------------
def _image(data: Dict[str, Any], key: str):
    image = data.get("default_image") or {}
    return image.get(key)


def to_summary(plant: Dict[str, Any]) -> CatalogSummary:
    return CatalogSummary(
        id=plant["id"],
        common_name=plant.get("common_name"),
        scientific_names=plant.get("scientific_name") or [],
        other_names=plant.get("other_name") or [],
        thumbnail=_image(plant, "thumbnail"),
    )


def to_detail(data: Dict[str, Any]) -> CatalogDetail:
    benchmark = data.get("watering_general_benchmark") or {}
    dimensions = data.get("dimensions") or {}
    # dimensions が配列で返ってくる種もあるので先頭を使う
    if isinstance(dimensions, list):
        dimensions = dimensions[0] if dimensions else {}
    hardiness = data.get("hardiness") or {}

    return CatalogDetail(
        id=data["id"],
        common_name=data.get("common_name"),
        scientific_names=data.get("scientific_name") or [],
        other_names=data.get("other_name") or [],
        type=data.get("type"),
        cycle=data.get("cycle"),
        watering={
            "frequency": data.get("watering"),
            "benchmark": (
                f"{benchmark['value']} {benchmark.get('unit', '')}".strip()
                if benchmark.get("value")
                else None
            ),
        },
        sunlight=data.get("sunlight") or [],
        care={
            "level": data.get("care_level"),
            "maintenance": data.get("maintenance"),
        },
        dimensions={
            "min_height": dimensions.get("min_value"),
            "max_height": dimensions.get("max_value"),
            "unit": dimensions.get("unit"),
        },
        indoor=data.get("indoor"),
        flowering={
            "has_flowers": data.get("flowers"),
            "season": data.get("flowering_season"),
        },
        hardiness={
            "min": hardiness.get("min"),
            "max": hardiness.get("max"),
        },
        propagation=data.get("propagation") or [],
        description=data.get("description"),
        thumbnail=_image(data, "thumbnail"),
        image=_image(data, "regular_url"),
    )


class PerenualClient:
    def __init__(self, http: httpx.Client, api_key: str):
        self.http = http
        self.api_key = api_key

    def _get(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        query = {"key": self.api_key, **(params or {})}
        try:
            response = self.http.get(path, params=query)
        except httpx.HTTPError as e:
            logger.error("Perenual request failed path=%s: %s", path, e)
            raise UpstreamError()

        if response.is_error:
            logger.error("Perenual API responded with status: %s", response.status_code)
            raise UpstreamError()

        try:
            return response.json()
        except ValueError:
            logger.error("Perenual returned a non-JSON body path=%s", path)
            raise UpstreamError()

    def search(self, query: str) -> List[CatalogSummary]:
        data = self._get("/species-list", {"q": query})
        try:
            return [to_summary(p) for p in data.get("data") or []]
        except (KeyError, TypeError, AttributeError, SchemaError) as e:
            logger.error("unexpected Perenual species-list payload: %s", e)
            raise UpstreamError()

    def get_plant(self, plant_id: int) -> CatalogDetail:
        data = self._get(f"/species/details/{plant_id}")
        try:
            return to_detail(data)
        except (KeyError, TypeError, AttributeError, SchemaError) as e:
            # 無料プランだと一部の項目が "Upgrade Plans To Premium..." の文字列になる
            logger.error("unexpected Perenual details payload id=%s: %s", plant_id, e)
            raise UpstreamError()
