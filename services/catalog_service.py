# services/catalog_service.py
import logging
from typing import List, Optional

import httpx

from core.config import Settings
from schemas.catalog import CatalogDetail, CatalogMatch, CatalogSummary
from services.perenual_client import PerenualClient
from services.plantnet_client import PlantNetClient

logger = logging.getLogger(__name__)


class PlantCatalog:
    """
    外部の植物カタログ（読み取り専用）。
    名前検索・詳細は Perenual、種検索・画像判定は Pl@ntNet
    """

    def __init__(self, perenual: PerenualClient, plantnet: PlantNetClient):
        self.perenual = perenual
        self.plantnet = plantnet

    def search_by_name(self, query: str) -> List[CatalogSummary]:
        return self.perenual.search(query)

    def search_species(self, query: str) -> List[CatalogSummary]:
        return self.plantnet.search(query)

    def fetch_by_id(self, catalog_id: int) -> CatalogDetail:
        return self.perenual.get_plant(catalog_id)

    def identify_from_image(
        self, image: bytes, filename: str, content_type: str
    ) -> Optional[CatalogMatch]:
        match = self.plantnet.identify(image, filename=filename, content_type=content_type)
        if match:
            logger.info("identified %s (score=%.3f)", match.scientific_name or "?", match.score)
        return match


def build_catalog(settings: Settings) -> PlantCatalog:
    """起動時に1回だけ呼ぶ。httpx.Client は app 終了時に close する"""
    timeout = httpx.Timeout(settings.catalog_timeout_seconds)
    perenual_http = httpx.Client(base_url=settings.perenual_api_url, timeout=timeout)
    plantnet_http = httpx.Client(base_url=settings.plantnet_api_url, timeout=timeout)
    return PlantCatalog(
        perenual=PerenualClient(perenual_http, settings.perenual_api_key),
        plantnet=PlantNetClient(plantnet_http, settings.plantnet_api_key),
    )


def close_catalog(catalog: PlantCatalog) -> None:
    catalog.perenual.http.close()
    catalog.plantnet.http.close()
