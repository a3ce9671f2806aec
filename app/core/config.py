from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

DEFAULT_RANKING_CONFIG = Path(__file__).resolve().parent.parent / "data" / "ranking.json"


class Config(BaseSettings):
    db_url: str
    env: Literal["prod", "dev"] = "prod"
    log_level: str = "INFO"

    # Pinned list and weight tables
    ranking_config_path: Path = DEFAULT_RANKING_CONFIG
    warm_pinned_on_startup: bool = True
    warm_chunk_size: int = 20

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"


load_dotenv()
settings = Config()  # pyright: ignore[reportCallIssue]
