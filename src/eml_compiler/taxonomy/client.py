"""HTTP client for the taxonomy search index."""

from __future__ import annotations

from typing import Any, Iterable, Protocol, Sequence

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from eml_compiler.core.config import Settings, get_settings
from eml_compiler.core.exceptions import TaxonomyLookupError
from eml_compiler.core.logging import get_logger
from eml_compiler.core.models import TaxonRecord

LOGGER = get_logger(__name__)

TRANSIENT_ERRORS = (httpx.TransportError, TimeoutError)


class TaxonomyLookup(Protocol):
    async def lookup(self, ids: Sequence[int | str]) -> list[TaxonRecord]:
        """Return taxon records for the ids that exist; unknown ids are skipped."""


class TaxonomyClient:
    """Thin async wrapper around the taxonomy ``_search`` endpoint."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._index = self._settings.taxonomy_index
        self._max_attempts = max(1, self._settings.max_retries)
        self._client = http_client or httpx.AsyncClient(**self._settings.taxonomy_client_config())

    async def lookup(self, ids: Sequence[int | str]) -> list[TaxonRecord]:
        """Fetch the taxon documents whose ids are listed."""
        requested = [str(item) for item in ids]
        if not requested:
            return []
        LOGGER.info("taxonomy.lookup.request", index=self._index, id_count=len(requested))
        payload = await self._search_with_retry({"query": {"terms": {"_id": requested}}, "size": len(requested)})
        records = list(_parse_hits(payload))
        LOGGER.info(
            "taxonomy.lookup.response",
            requested=len(requested),
            matched=len(records),
        )
        return records

    async def _search_with_retry(self, body: dict[str, Any]) -> Any:
        retryer = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(
                multiplier=max(self._settings.retry_backoff, 0.1),
                min=0.5,
                max=8,
            ),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        )
        try:
            async for attempt in retryer:
                with attempt:
                    response = await self._client.post(f"{self._index}/_search", json=body)
                    response.raise_for_status()
                    return response.json()
        except TRANSIENT_ERRORS as exc:  # type: ignore[misc]
            LOGGER.error(
                "taxonomy.lookup.unavailable",
                attempts=self._max_attempts,
                index=self._index,
            )
            raise TaxonomyLookupError(
                f"Taxonomy search failed after {self._max_attempts} attempts"
            ) from exc
        except httpx.HTTPStatusError as exc:
            LOGGER.error(
                "taxonomy.lookup.http_error",
                status=exc.response.status_code,
                index=self._index,
            )
            raise TaxonomyLookupError(
                f"Taxonomy search returned HTTP {exc.response.status_code}"
            ) from exc
        except ValueError as exc:
            raise TaxonomyLookupError("Taxonomy search returned malformed JSON") from exc

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "TaxonomyClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def _parse_hits(payload: Any) -> Iterable[TaxonRecord]:
    if not isinstance(payload, dict):
        LOGGER.warning("taxonomy.unexpected_payload", payload_type=type(payload).__name__)
        return
    hits = (payload.get("hits") or {}).get("hits") or []
    for hit in hits:
        if not isinstance(hit, dict) or hit.get("_id") is None:
            continue
        source = hit.get("_source") or {}
        yield TaxonRecord(
            taxon_id=str(hit["_id"]),
            rank_name=source.get("tty_name"),
            scientific_name=_scientific_name(source),
            common_name=source.get("english_name"),
            code=source.get("code"),
        )


def _scientific_name(source: dict[str, Any]) -> str | None:
    parts = [source.get(key) for key in ("unit_name1", "unit_name2", "unit_name3")]
    name = " ".join(str(part) for part in parts if part)
    return name or None
