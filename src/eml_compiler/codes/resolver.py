"""Code table lookups used to label numeric foreign keys."""

from __future__ import annotations

from typing import Any, Final, Iterable, Mapping, Protocol

from eml_compiler.core.logging import get_logger

LOGGER = get_logger(__name__)

PROJECT_TYPE: Final[str] = "project_type"
ACTIVITY: Final[str] = "activity"
IUCN_LEVEL_1: Final[str] = "iucn_conservation_action_level_1_classification"
IUCN_LEVEL_2: Final[str] = "iucn_conservation_action_level_2_subclassification"
IUCN_LEVEL_3: Final[str] = "iucn_conservation_action_level_3_subclassification"
FIRST_NATIONS: Final[str] = "first_nations"
FIELD_METHODS: Final[str] = "field_methods"
ECOLOGICAL_SEASONS: Final[str] = "ecological_seasons"
VANTAGE_CODES: Final[str] = "vantage_codes"
INTENDED_OUTCOMES: Final[str] = "intended_outcomes"


class CodeTableResolver(Protocol):
    def resolve(self, code_set: str, code_id: int | None) -> str | None:
        """Return the label for ``code_id`` in ``code_set``, or ``None``."""


class CodeTables:
    """In-memory resolver over ``{code_set: [{"id": ..., "name": ...}]}`` payloads."""

    def __init__(self, code_sets: Mapping[str, Iterable[Mapping[str, Any]]]) -> None:
        self._index: dict[str, dict[int, str]] = {}
        for code_set, rows in code_sets.items():
            labels: dict[int, str] = {}
            for row in rows or []:
                code_id = row.get("id")
                name = row.get("name")
                if code_id is None or not name:
                    continue
                labels[int(code_id)] = str(name)
            self._index[code_set] = labels

    def resolve(self, code_set: str, code_id: int | None) -> str | None:
        if code_id is None:
            return None
        label = self._index.get(code_set, {}).get(int(code_id))
        if label is None:
            LOGGER.debug("codes.unresolved", code_set=code_set, code_id=code_id)
        return label

    def resolve_many(self, code_set: str, code_ids: Iterable[int]) -> list[str]:
        return resolve_many(self, code_set, code_ids)


def resolve_many(resolver: CodeTableResolver, code_set: str, code_ids: Iterable[int]) -> list[str]:
    """Resolve ids in order, dropping any that have no label."""
    labels: list[str] = []
    for code_id in code_ids:
        label = resolver.resolve(code_set, code_id)
        if label:
            labels.append(label)
    return labels
