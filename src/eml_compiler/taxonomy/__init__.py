"""Taxonomy enrichment client."""

from .client import TaxonomyClient, TaxonomyLookup

__all__ = [
    "TaxonomyClient",
    "TaxonomyLookup",
]
