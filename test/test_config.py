from __future__ import annotations

import asyncio
from pathlib import Path

from eml_compiler.core.config import Settings, _load_settings_overrides
from eml_compiler.core.constants import CONSTANT_NAMES, NOT_SUPPLIED, EmlConstants
from eml_compiler.eml.constants import SettingsConstantsProvider, load_eml_constants

from eml_fakes import make_settings


def _write_secrets(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "secrets.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_missing_secrets_file_yields_no_overrides(tmp_path: Path) -> None:
    assert _load_settings_overrides(tmp_path / "absent.toml") == {}


def test_secrets_file_overrides(tmp_path: Path) -> None:
    path = _write_secrets(
        tmp_path,
        """
[taxonomy]
url = "https://search.example:9243"
index = "itis"
api_key = "ApiKey abc123"
timeout = "12.5"

[eml]
organization_name = "Example Organisation"
max_concurrency = 8
unknown_key = "ignored"
""",
    )

    overrides = _load_settings_overrides(path)

    assert overrides == {
        "taxonomy_base_url": "https://search.example:9243",
        "taxonomy_index": "itis",
        "taxonomy_api_key": "abc123",
        "taxonomy_timeout": 12.5,
        "organization_name": "Example Organisation",
        "max_concurrency": 8,
    }
    settings = Settings(**overrides)
    assert settings.taxonomy_client_config()["headers"] == {"Authorization": "ApiKey abc123"}


def test_elasticsearch_section_is_accepted(tmp_path: Path) -> None:
    path = _write_secrets(tmp_path, '[elasticsearch]\nurl = "http://es.example:9200"\n')

    assert _load_settings_overrides(path) == {"taxonomy_base_url": "http://es.example:9200"}


def test_constants_fall_back_to_not_supplied() -> None:
    constants = EmlConstants.from_mapping({"PROVIDER_URL": "https://provider.example", "ORGANIZATION_URL": "  "})

    assert constants.provider_url == "https://provider.example"
    assert constants.organization_url == NOT_SUPPLIED
    assert constants.intellectual_rights == NOT_SUPPLIED


def test_settings_provider_serves_every_constant() -> None:
    provider = SettingsConstantsProvider(make_settings(intellectual_rights=None))

    values = asyncio.run(provider.fetch_constants(CONSTANT_NAMES))
    constants = asyncio.run(load_eml_constants(provider))

    assert set(values) == set(CONSTANT_NAMES)
    assert values["ORGANIZATION_NAME_FULL"] == "Example Organisation"
    assert constants.organization_name == "Example Organisation"
    assert constants.taxonomic_provider_url == "https://taxonomy.example"
    assert constants.intellectual_rights == NOT_SUPPLIED
