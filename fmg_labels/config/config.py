from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./fmg_labels.db", description="SQLAlchemy database URL"
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Label Generation Configuration
    label_mode: str = Field(
        default="auto", description="State label mode: auto, short or full"
    )
    angle_step: int = Field(default=9, description="Ray sampling step in degrees")
    letter_width: float = Field(
        default=6.0, description="Glyph width for fixed-width text measurement"
    )
    line_height: float = Field(
        default=12.0, description="Line height for fixed-width text measurement"
    )


# Instantiate singleton settings object
settings = Settings()
