"""Shared constant values used across the EML compiler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Mapping

NOT_SUPPLIED: Final[str] = "Not Supplied"

EML_LANGUAGE: Final[str] = "English"

EML_NAMESPACES: Final[dict[str, str]] = {
    "@xmlns:eml": "https://eml.ecoinformatics.org/eml-2.2.0",
    "@xmlns:xsi": "http://www.w3.org/2001/XMLSchema-instance",
    "@xmlns:stmml": "http://www.xml-cml.org/schema/schema24",
    "@xsi:schemaLocation": "https://eml.ecoinformatics.org/eml-2.2.0 xsd/eml.xsd",
}

# Metadata constant names, in the order they are requested from the provider.
CONSTANT_NAMES: Final[tuple[str, ...]] = (
    "ORGANIZATION_URL",
    "ORGANIZATION_NAME_FULL",
    "PROVIDER_URL",
    "SECURITY_PROVIDER_URL",
    "INTELLECTUAL_RIGHTS",
    "TAXONOMIC_PROVIDER_URL",
)


@dataclass(slots=True, frozen=True)
class EmlConstants:
    """Organisation-level values used to populate the EML document."""

    provider_url: str = NOT_SUPPLIED
    security_provider_url: str = NOT_SUPPLIED
    organization_name: str = NOT_SUPPLIED
    organization_url: str = NOT_SUPPLIED
    intellectual_rights: str = NOT_SUPPLIED
    taxonomic_provider_url: str = NOT_SUPPLIED

    @classmethod
    def from_mapping(cls, values: Mapping[str, str | None]) -> "EmlConstants":
        def pick(name: str) -> str:
            value = values.get(name)
            if value is None:
                return NOT_SUPPLIED
            text = str(value).strip()
            return text or NOT_SUPPLIED

        return cls(
            provider_url=pick("PROVIDER_URL"),
            security_provider_url=pick("SECURITY_PROVIDER_URL"),
            organization_name=pick("ORGANIZATION_NAME_FULL"),
            organization_url=pick("ORGANIZATION_URL"),
            intellectual_rights=pick("INTELLECTUAL_RIGHTS"),
            taxonomic_provider_url=pick("TAXONOMIC_PROVIDER_URL"),
        )
