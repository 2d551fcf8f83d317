"""Shared core utilities for the EML compiler."""

from .config import Settings, get_settings
from .constants import NOT_SUPPLIED, EmlConstants
from .exceptions import (
    DanglingReferenceError,
    EmlCompilerError,
    EmlPackageStateError,
    MissingPackageIdError,
    TaxonomyLookupError,
)
from .logging import bind_compile_context, configure_logging, get_logger
from .models import (
    AdditionalMetadataBlock,
    Coordinator,
    FundingSource,
    IucnClassification,
    Location,
    MetadataSource,
    Partnerships,
    Permit,
    ProjectRecord,
    Proprietor,
    PurposeAndMethodology,
    SurveyRecord,
    SurveySource,
    TaxonRecord,
)

__all__ = [
    "Settings",
    "NOT_SUPPLIED",
    "EmlConstants",
    "AdditionalMetadataBlock",
    "Coordinator",
    "FundingSource",
    "IucnClassification",
    "Location",
    "MetadataSource",
    "Partnerships",
    "Permit",
    "ProjectRecord",
    "Proprietor",
    "PurposeAndMethodology",
    "SurveyRecord",
    "SurveySource",
    "TaxonRecord",
    "EmlCompilerError",
    "EmlPackageStateError",
    "MissingPackageIdError",
    "DanglingReferenceError",
    "TaxonomyLookupError",
    "get_settings",
    "bind_compile_context",
    "configure_logging",
    "get_logger",
]
