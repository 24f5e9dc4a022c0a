# core/config.py
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv


PERENUAL_API_URL = "https://perenual.com/api"
PLANTNET_API_URL = "https://my-api.plantnet.org"
EXPO_HOST = "https://exp.host"

REQUIRED_ENV = ("DATABASE_URL", "JWT_SECRET", "PERENUAL_API_KEY", "PLANTNET_API_KEY")


@dataclass(frozen=True)
class Settings:
    """
    起動時に1回だけ組み立てて、各コンポーネントに明示的に渡す設定値
    （モジュール import 時に環境変数を読まない）
    """
    database_url: str
    jwt_secret: str
    perenual_api_key: str
    plantnet_api_key: str
    jwt_algorithm: str = "HS256"
    db_echo: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    catalog_timeout_seconds: float = 10.0
    perenual_api_url: str = PERENUAL_API_URL
    plantnet_api_url: str = PLANTNET_API_URL
    expo_host: str = EXPO_HOST


def _as_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def _as_list(value: Optional[str]) -> List[str]:
    if not value:
        return ["*"]
    parts = [item.strip() for item in value.split(",") if item.strip()]
    return parts or ["*"]


def load_settings() -> Settings:
    """
    .env と環境変数から Settings を作る。
    必須項目が欠けていたら起動時に落とす（fail fast）
    """
    load_dotenv()

    missing = [name for name in REQUIRED_ENV if not os.getenv(name)]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    return Settings(
        database_url=os.environ["DATABASE_URL"],
        jwt_secret=os.environ["JWT_SECRET"],
        perenual_api_key=os.environ["PERENUAL_API_KEY"],
        plantnet_api_key=os.environ["PLANTNET_API_KEY"],
        db_echo=_as_bool(os.getenv("DB_ECHO")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_as_list(os.getenv("CORS_ORIGINS")),
        catalog_timeout_seconds=float(os.getenv("CATALOG_TIMEOUT_SECONDS", "10")),
        perenual_api_url=os.getenv("PERENUAL_API_URL", PERENUAL_API_URL),
        plantnet_api_url=os.getenv("PLANTNET_API_URL", PLANTNET_API_URL),
        expo_host=os.getenv("EXPO_HOST", EXPO_HOST),
    )
