from __future__ import annotations

from functools import lru_cache

from ospry.config import Settings, get_settings
from ospry.services.client import OspryClient
from ospry.services.store import InMemoryMetadataStore, MetadataStore


def get_app_settings() -> Settings:
    return get_settings()


@lru_cache()
def get_ospry_client() -> OspryClient:
    """Server-side client, authenticated with the secret key."""

    return OspryClient(get_settings().ospry_config())


@lru_cache()
def get_store() -> MetadataStore:
    return InMemoryMetadataStore()
