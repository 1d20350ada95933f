from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()

DEFAULT_SERVER_URL = "https://api.ospry.io/v1"
DEFAULT_RENDER_HOST = "api.ospry.io"


class OspryConfig(BaseModel):
    """Everything a client needs to talk to ospry and sign urls."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="API key; the secret key is required for signing.")
    server_url: str = Field(DEFAULT_SERVER_URL, description="Base url of the REST api.")
    render_host: str = Field(DEFAULT_RENDER_HOST, description="Host that serves signed urls.")
    timeout: float = Field(10.0, gt=0, description="HTTP timeout in seconds.")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # ospry
    ospry_secret_key: str = Field(..., description="Secret api key (sk-...), used server-side.")
    ospry_public_key: str = Field(..., description="Public api key (pk-...), handed to browsers.")
    ospry_server_url: str = Field(DEFAULT_SERVER_URL)
    ospry_render_host: str = Field(DEFAULT_RENDER_HOST)
    ospry_http_timeout: float = Field(10.0, gt=0)

    # Demo server
    signed_url_ttl_seconds: int = Field(60, ge=1, description="Lifetime of signed urls handed out by the demo.")
    log_level: str = Field("INFO")

    def ospry_config(self, key: Optional[str] = None) -> OspryConfig:
        """Build a client config, using the secret key unless *key* is given."""

        return OspryConfig(
            key=key if key is not None else self.ospry_secret_key,
            server_url=self.ospry_server_url,
            render_host=self.ospry_render_host,
            timeout=self.ospry_http_timeout,
        )


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
