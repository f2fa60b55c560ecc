from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings


ASSETS_DIR = Path(__file__).resolve().parents[1] / "assets"


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    env: Env = Env.local
    html_dir: Path = ASSETS_DIR / "html"
    db_url: str = "sqlite+aiosqlite:///fridgician.db"
    storage_key: str = "recipes"
    openai_api_key: str | None = None
    text_model: str = "gpt-4o-mini"
    image_model: str = "gpt-image-1"
    image_aspect_ratio: str = "4:3"
    recipe_count: int = 3
    request_timeout: float | None = None
    log_level: str = "INFO"
