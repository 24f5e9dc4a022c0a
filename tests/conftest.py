"""Test fixtures: in-memory SQLite app + mocked Perenual / Pl@ntNet upstreams."""
from __future__ import annotations

from typing import Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import Session

from core.config import Settings
from db.database import Base, make_engine, make_session_factory
from main import create_app
from services.catalog_service import PlantCatalog
from services.perenual_client import PerenualClient
from services.plantnet_client import PlantNetClient


JWT_SECRET = "test-secret-test-secret-test-secret"

ROSE_SUMMARY = {
    "id": 42,
    "common_name": "rose",
    "scientific_name": ["Rosa"],
    "other_name": ["garden rose"],
    "default_image": {"thumbnail": "https://img.example/rose-thumb.jpg"},
}

MONSTERA_SUMMARY = {
    "id": 7,
    "common_name": "Swiss cheese plant",
    "scientific_name": ["Monstera deliciosa"],
    "other_name": [],
    "default_image": None,
}

ROSE_DETAIL = {
    "id": 42,
    "common_name": "rose",
    "scientific_name": ["Rosa"],
    "other_name": ["garden rose"],
    "type": "Flower",
    "cycle": "Perennial",
    "watering": "Average",
    "watering_general_benchmark": {"value": "5-7", "unit": "days"},
    "sunlight": ["full sun"],
    "care_level": "Medium",
    "maintenance": "Moderate",
    "dimensions": {"type": "Height", "min_value": 1, "max_value": 2, "unit": "feet"},
    "indoor": False,
    "flowers": True,
    "flowering_season": "Summer",
    "hardiness": {"min": "5", "max": "9"},
    "propagation": ["Cutting"],
    "description": "A woody perennial.",
    "default_image": {
        "thumbnail": "https://img.example/rose-thumb.jpg",
        "regular_url": "https://img.example/rose.jpg",
    },
}


def plantnet_result(score: float, name: str, common_names: List[str]) -> Dict:
    return {
        "score": score,
        "species": {
            "scientificNameWithoutAuthor": name,
            "scientificNameAuthorship": "L.",
            "genus": {"scientificNameWithoutAuthor": name.split(" ")[0] if name else ""},
            "family": {"scientificNameWithoutAuthor": "Rosaceae"},
            "commonNames": common_names,
            "scientificName": f"{name} L.",
        },
        "gbif": {"id": "123"},
        "powo": {"id": "456"},
    }


class FakeUpstream:
    """Perenual と Pl@ntNet の代わりに httpx.MockTransport で応答する"""

    def __init__(self):
        self.species: Dict[int, Dict] = {42: ROSE_DETAIL}
        self.search_results: Dict[str, List[Dict]] = {
            "rose": [ROSE_SUMMARY],
            "rosa": [ROSE_SUMMARY],
            "swiss cheese plant": [MONSTERA_SUMMARY],
        }
        self.plantnet_species: List[Dict] = [
            {
                "id": "rosa-canina",
                "commonNames": ["dog rose", "briar"],
                "scientificNameWithoutAuthor": "Rosa canina",
                "gbifId": "8395064",
            }
        ]
        self.identify_results: List[Dict] = []
        self.identify_status = 200
        self.fail = False
        self.requests: List[httpx.Request] = []

    def perenual(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(500, json={"message": "boom"})

        path = request.url.path
        if path == "/api/species-list":
            q = request.url.params.get("q", "").lower()
            return httpx.Response(200, json={"data": self.search_results.get(q, [])})
        if path.startswith("/api/species/details/"):
            plant_id = int(path.rsplit("/", 1)[1])
            if plant_id not in self.species:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, json=self.species[plant_id])
        return httpx.Response(404)

    def plantnet(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(500, json={"message": "boom"})

        path = request.url.path
        if path == "/v2/species":
            prefix = request.url.params.get("prefix", "").lower()
            matches = [
                s for s in self.plantnet_species
                if s["scientificNameWithoutAuthor"].lower().startswith(prefix)
                or any(n.lower().startswith(prefix) for n in s["commonNames"])
            ]
            return httpx.Response(200, json=matches)
        if path == "/v2/identify/all":
            if self.identify_status != 200:
                return httpx.Response(self.identify_status, json={"message": "Species not found"})
            return httpx.Response(200, json={"results": self.identify_results})
        return httpx.Response(404)


def make_token(sub: str) -> str:
    return jwt.encode({"sub": sub, "role": "authenticated"}, JWT_SECRET, algorithm="HS256")


def bearer(sub: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(sub)}"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        jwt_secret=JWT_SECRET,
        perenual_api_key="perenual-key",
        plantnet_api_key="plantnet-key",
        log_level="WARNING",
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def catalog(settings: Settings, upstream: FakeUpstream) -> PlantCatalog:
    perenual_http = httpx.Client(
        base_url=settings.perenual_api_url, transport=httpx.MockTransport(upstream.perenual)
    )
    plantnet_http = httpx.Client(
        base_url=settings.plantnet_api_url, transport=httpx.MockTransport(upstream.plantnet)
    )
    return PlantCatalog(
        perenual=PerenualClient(perenual_http, settings.perenual_api_key),
        plantnet=PlantNetClient(plantnet_http, settings.plantnet_api_key),
    )


@pytest.fixture
def client(settings: Settings, catalog: PlantCatalog):
    app = create_app(settings, plant_catalog=catalog)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def alice() -> Dict[str, str]:
    return bearer("user_alice")


@pytest.fixture
def bob() -> Dict[str, str]:
    return bearer("user_bob")


@pytest.fixture
def db(settings: Settings):
    """API を通さずにストアを直接触るためのセッション"""
    engine = make_engine(settings)
    Base.metadata.create_all(bind=engine)
    session: Session = make_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
