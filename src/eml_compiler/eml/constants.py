"""Batch loading of the organisation constants used in EML documents."""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from eml_compiler.core.config import Settings, get_settings
from eml_compiler.core.constants import CONSTANT_NAMES, EmlConstants
from eml_compiler.core.logging import get_logger

LOGGER = get_logger(__name__)


class ConstantsProvider(Protocol):
    async def fetch_constants(self, names: Sequence[str]) -> Mapping[str, str | None]:
        """Return the stored value for each requested constant name."""


class SettingsConstantsProvider:
    """Serve organisation constants from application settings."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    async def fetch_constants(self, names: Sequence[str]) -> Mapping[str, str | None]:
        values = self._settings.constant_values()
        return {name: values.get(name) for name in names}


async def load_eml_constants(provider: ConstantsProvider) -> EmlConstants:
    """Fetch every constant in one call and freeze the result."""
    values = await provider.fetch_constants(CONSTANT_NAMES)
    constants = EmlConstants.from_mapping(values)
    missing = [name for name in CONSTANT_NAMES if not values.get(name)]
    if missing:
        LOGGER.debug("eml.constants.not_supplied", names=missing)
    return constants
