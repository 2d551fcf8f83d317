"""Ecological Metadata Language (EML) document compilation."""

from .constants import ConstantsProvider, SettingsConstantsProvider, load_eml_constants
from .package import EmlPackage, PackageState, render_xml
from .service import EmlService, compile_project_eml
from .sources import SourceLoader, SourceProvider

__all__ = [
    "ConstantsProvider",
    "EmlPackage",
    "EmlService",
    "PackageState",
    "SettingsConstantsProvider",
    "SourceLoader",
    "SourceProvider",
    "compile_project_eml",
    "load_eml_constants",
    "render_xml",
]
