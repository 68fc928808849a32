"""Environment-driven settings shared by the API and the CLI."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from .storage import DEFAULT_RESOURCE


class Settings:
    def __init__(
        self,
        data_dir: Path,
        resource: str,
        environment: str,
        allowed_origins: List[str],
    ) -> None:
        self.data_dir = data_dir
        self.resource = resource
        self.environment = environment
        self.allowed_origins = allowed_origins

    @property
    def is_development(self) -> bool:
        return self.environment in {"dev", "development"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = Path(os.getenv("BUDGET_DATA_DIR", "data"))
    resource = os.getenv("BUDGET_RESOURCE", DEFAULT_RESOURCE)
    environment = os.getenv("BUDGET_ENV", "prod").strip().lower()
    raw_origins = os.getenv("BUDGET_ALLOWED_ORIGINS", "")
    origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
    return Settings(
        data_dir=data_dir,
        resource=resource,
        environment=environment,
        allowed_origins=origins,
    )
