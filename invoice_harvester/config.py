"""
Runtime settings for invoice-harvester.

Values come from the environment; a `.env` file in the working directory is
loaded first when present.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "harvester.yaml"


class Settings(BaseModel):
    """
    Environment-driven settings.

    Attributes:
        log_level: Logging level name
        log_format: "json" or "text"
        max_workers: Concurrent extraction calls per upload batch
        extraction_url: Prompt service endpoint (None selects the simulated extractor)
        extraction_timeout: HTTP timeout in seconds for the prompt service
        config_path: YAML file with schema fields and seed templates
    """

    log_level: str = "INFO"
    log_format: str = "json"
    max_workers: int = Field(4, ge=1)
    extraction_url: str | None = None
    extraction_timeout: float = Field(60.0, gt=0)
    config_path: Path = DEFAULT_CONFIG_PATH

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Settings":
        """Build settings from environment variables (after loading .env)."""
        load_dotenv(env_file)

        values: dict = {}
        mapping = {
            "LOG_LEVEL": "log_level",
            "LOG_FORMAT": "log_format",
            "HARVESTER_MAX_WORKERS": "max_workers",
            "HARVESTER_EXTRACTION_URL": "extraction_url",
            "HARVESTER_EXTRACTION_TIMEOUT": "extraction_timeout",
            "HARVESTER_CONFIG": "config_path",
        }
        for env_name, field_name in mapping.items():
            raw = os.getenv(env_name)
            if raw is not None and raw.strip() != "":
                values[field_name] = raw.strip()

        return cls(**values)
