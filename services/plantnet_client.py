# services/plantnet_client.py
"""
Pl@ntNet API クライアント（種名の前方一致検索 + 画像判定）
"""
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as SchemaError

from core.errors import UpstreamError
from schemas.catalog import CatalogMatch, CatalogSummary

logger = logging.getLogger(__name__)


def _name(block: Optional[Dict[str, Any]]) -> Optional[str]:
    if not block:
        return None
    return block.get("scientificNameWithoutAuthor") or block.get("scientificName")


def to_summary(species: Dict[str, Any]) -> CatalogSummary:
    common_names = species.get("commonNames") or []
    scientific = species.get("scientificNameWithoutAuthor")
    return CatalogSummary(
        id=species.get("id") or species.get("gbifId") or scientific,
        common_name=common_names[0] if common_names else None,
        scientific_names=[scientific] if scientific else [],
        other_names=common_names[1:],
        thumbnail=None,
    )


def to_match(result: Dict[str, Any]) -> CatalogMatch:
    species = result.get("species") or {}
    return CatalogMatch(
        score=float(result.get("score") or 0.0),
        scientific_name=(species.get("scientificNameWithoutAuthor") or "").strip(),
        scientific_name_authorship=species.get("scientificNameAuthorship"),
        genus=_name(species.get("genus")),
        family=_name(species.get("family")),
        common_names=species.get("commonNames") or [],
        gbif_id=(result.get("gbif") or {}).get("id"),
        powo_id=(result.get("powo") or {}).get("id"),
    )


class PlantNetClient:
    def __init__(self, http: httpx.Client, api_key: str):
        self.http = http
        self.api_key = api_key

    def _check(self, response: httpx.Response) -> None:
        if response.is_error:
            logger.error("Plantnet API responded with status: %s", response.status_code)
            raise UpstreamError()

    def search(self, query: str) -> List[CatalogSummary]:
        params = {"lang": "en", "type": "kt", "prefix": query, "api-key": self.api_key}
        try:
            response = self.http.get("/v2/species", params=params)
        except httpx.HTTPError as e:
            logger.error("Plantnet species request failed: %s", e)
            raise UpstreamError()

        self._check(response)
        try:
            return [to_summary(s) for s in response.json() or []]
        except (ValueError, KeyError, TypeError, AttributeError, SchemaError) as e:
            logger.error("unexpected Plantnet species payload: %s", e)
            raise UpstreamError()

    def identify(
        self,
        image: bytes,
        filename: str = "image.jpg",
        content_type: str = "image/jpeg",
    ) -> Optional[CatalogMatch]:
        """
        一番スコアの高い種を返す。
        Pl@ntNet は該当なしのとき 404 (Species not found) を返すので None にする
        """
        params = {"api-key": self.api_key, "lang": "en"}
        files = {"images": (filename, image, content_type)}
        try:
            response = self.http.post(
                "/v2/identify/all", params=params, files=files, data={"organs": "auto"}
            )
        except httpx.HTTPError as e:
            logger.error("Plantnet identify request failed: %s", e)
            raise UpstreamError()

        if response.status_code == 404:
            return None
        self._check(response)

        try:
            results = response.json().get("results") or []
            if not results:
                return None

            best = max(results, key=lambda r: r.get("score") or 0.0)
            return to_match(best)
        except (ValueError, KeyError, TypeError, AttributeError, SchemaError) as e:
            logger.error("unexpected Plantnet identify payload: %s", e)
            raise UpstreamError()
