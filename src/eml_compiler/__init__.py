"""Compile research project and survey metadata into EML documents."""

from .eml import EmlPackage, EmlService, compile_project_eml

__all__ = [
    "EmlPackage",
    "EmlService",
    "compile_project_eml",
]
