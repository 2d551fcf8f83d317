"""Settings for the EML compiler, read from ``EML_*`` variables and the secrets file."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRETS_PATH = Path(".secrets/secrets.toml")


def _authorization_header(api_key: str | None) -> dict[str, str]:
    if not api_key:
        return {}
    return {"Authorization": f"ApiKey {api_key}"}


class Settings(BaseSettings):
    """Central configuration for the EML compiler."""

    provider_url: str | None = None
    security_provider_url: str | None = None
    organization_name: str | None = None
    organization_url: str | None = None
    intellectual_rights: str | None = None
    taxonomic_provider_url: str | None = None

    taxonomy_base_url: HttpUrl = "http://localhost:9200"
    taxonomy_index: str = "taxonomy"
    taxonomy_api_key: str | None = None
    taxonomy_timeout: float | None = None

    request_timeout: float = 30.0
    max_retries: int = 3
    retry_backoff: float = 0.5
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = True
    max_concurrency: int = 4

    model_config = SettingsConfigDict(env_prefix="EML_", env_file=(), extra="ignore")

    def taxonomy_client_config(self) -> dict[str, Any]:
        """Return the keyword arguments used to build the taxonomy HTTP client."""
        config: dict[str, Any] = {"base_url": str(self.taxonomy_base_url)}
        headers = _authorization_header(self.taxonomy_api_key)
        if headers:
            config["headers"] = headers
        timeout = self.taxonomy_timeout or self.request_timeout
        if timeout and timeout > 0:
            config["timeout"] = float(timeout)
        return config

    def constant_values(self) -> dict[str, str | None]:
        """Expose the organisation constants keyed by their metadata constant names."""
        return {
            "PROVIDER_URL": self.provider_url,
            "SECURITY_PROVIDER_URL": self.security_provider_url,
            "ORGANIZATION_NAME_FULL": self.organization_name,
            "ORGANIZATION_URL": self.organization_url,
            "INTELLECTUAL_RIGHTS": self.intellectual_rights,
            "TAXONOMIC_PROVIDER_URL": self.taxonomic_provider_url,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance."""
    overrides = _load_settings_overrides()
    return Settings(**overrides)


# Keys of the ``[taxonomy]`` secrets table mapped onto settings fields.
TAXONOMY_TABLE_FIELDS = {
    "url": "taxonomy_base_url",
    "index": "taxonomy_index",
}


def _load_settings_overrides(secrets_path: Path = DEFAULT_SECRETS_PATH) -> dict[str, Any]:
    """Read settings overrides from the ``[taxonomy]`` and ``[eml]`` secrets tables.

    ``[elasticsearch]`` is accepted as an alias of ``[taxonomy]``. Keys of the
    ``[eml]`` table are settings field names; unknown keys are ignored.
    """
    if not secrets_path.exists():
        return {}
    with secrets_path.open("rb") as handle:
        data = tomllib.load(handle)

    overrides: dict[str, Any] = {}
    taxonomy_table = _first_table(data, "taxonomy", "elasticsearch")
    for key, field_name in TAXONOMY_TABLE_FIELDS.items():
        overrides[field_name] = taxonomy_table.get(key)
    overrides["taxonomy_api_key"] = _strip_api_key_scheme(
        taxonomy_table.get("api_key") or taxonomy_table.get("authorization")
    )
    overrides["taxonomy_timeout"] = _seconds(taxonomy_table.get("timeout"))

    eml_table = _first_table(data, "eml")
    overrides.update({key: value for key, value in eml_table.items() if key in Settings.model_fields})
    return {key: value for key, value in overrides.items() if value is not None}


def _first_table(data: dict[str, Any], *names: str) -> dict[str, Any]:
    for name in names:
        table = data.get(name)
        if isinstance(table, dict):
            return table
    return {}


def _strip_api_key_scheme(value: str | None) -> str | None:
    token = (value or "").strip()
    scheme, _, rest = token.partition(" ")
    if rest and scheme.lower() == "apikey":
        token = rest.strip()
    return token or None


def _seconds(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None
