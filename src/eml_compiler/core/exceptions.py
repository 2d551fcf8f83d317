"""Custom exception hierarchy for the EML compiler."""

from __future__ import annotations


class EmlCompilerError(Exception):
    """Base error for the EML compiler."""


class EmlPackageStateError(EmlCompilerError):
    """Raised when the EML package is assembled out of order."""


class MissingPackageIdError(EmlCompilerError):
    """Raised when the EML root section is requested without a package id."""


class DanglingReferenceError(EmlCompilerError):
    """Raised when additional metadata describes an id absent from the document."""


class TaxonomyLookupError(EmlCompilerError):
    """Raised when the taxonomy service cannot be queried."""
