# schemas/catalog.py
from typing import List, Optional, Union

from schemas.common import CamelModel


class CatalogSummary(CamelModel):
    """検索結果1件分（Perenual の id は int、Pl@ntNet は文字列）"""
    id: Union[int, str]
    common_name: Optional[str] = None
    scientific_names: List[str] = []
    other_names: List[str] = []
    thumbnail: Optional[str] = None


class Watering(CamelModel):
    frequency: Optional[str] = None
    benchmark: Optional[str] = None


class Care(CamelModel):
    level: Optional[str] = None
    maintenance: Optional[str] = None


class Dimensions(CamelModel):
    min_height: Optional[float] = None
    max_height: Optional[float] = None
    unit: Optional[str] = None


class Flowering(CamelModel):
    has_flowers: Optional[bool] = None
    season: Optional[str] = None


class Hardiness(CamelModel):
    min: Optional[str] = None
    max: Optional[str] = None


class CatalogDetail(CamelModel):
    id: int
    common_name: Optional[str] = None
    scientific_names: List[str] = []
    other_names: List[str] = []
    type: Optional[str] = None
    cycle: Optional[str] = None
    watering: Watering = Watering()
    sunlight: List[str] = []
    care: Care = Care()
    dimensions: Dimensions = Dimensions()
    indoor: Optional[bool] = None
    flowering: Flowering = Flowering()
    hardiness: Hardiness = Hardiness()
    propagation: List[str] = []
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    image: Optional[str] = None


class CatalogMatch(CamelModel):
    """画像判定のベストマッチ"""
    score: float
    scientific_name: str = ""
    scientific_name_authorship: Optional[str] = None
    genus: Optional[str] = None
    family: Optional[str] = None
    common_names: List[str] = []
    gbif_id: Optional[str] = None
    powo_id: Optional[str] = None
