"""EML document assembly and XML rendering."""

from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Mapping

from lxml import etree

from eml_compiler.core.exceptions import DanglingReferenceError, EmlPackageStateError
from eml_compiler.core.logging import get_logger
from eml_compiler.core.models import AdditionalMetadataBlock

LOGGER = get_logger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
# Characters XML 1.0 cannot carry; lxml refuses them in text and attributes.
XML_ILLEGAL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")
ROOT_TAG = "eml:eml"


class PackageState(Enum):
    EMPTY = "empty"
    HAS_EML = "has-eml"
    HAS_DATASET = "has-eml+dataset"
    FINALIZED = "finalized"


class EmlPackage:
    """Accumulates the sections of one EML document.

    Sections must arrive in order: the root (``with_eml``), then the dataset
    (``with_dataset``); related projects can only be attached once the dataset
    exists. Additional metadata may be appended at any point before the
    package is built. Out-of-order calls raise :class:`EmlPackageStateError`.
    """

    def __init__(self, package_id: str) -> None:
        self.package_id = package_id
        self._state = PackageState.EMPTY
        self._eml_metadata: dict[str, Any] | None = None
        self._dataset_metadata: dict[str, Any] | None = None
        self._additional_metadata: list[AdditionalMetadataBlock] = []
        self._related_projects: list[dict[str, Any]] = []
        self._document: str | None = None

    @property
    def state(self) -> PackageState:
        return self._state

    @property
    def eml_metadata(self) -> dict[str, Any] | None:
        return self._eml_metadata

    @property
    def dataset_metadata(self) -> dict[str, Any] | None:
        return self._dataset_metadata

    @property
    def additional_metadata(self) -> list[AdditionalMetadataBlock]:
        return list(self._additional_metadata)

    @property
    def related_projects(self) -> list[dict[str, Any]]:
        return list(self._related_projects)

    def with_eml(self, section: Mapping[str, Any]) -> "EmlPackage":
        self._require(PackageState.EMPTY, "with_eml() must be the first section added to the package")
        self._eml_metadata = dict(section)
        self._state = PackageState.HAS_EML
        return self

    def with_dataset(self, section: Mapping[str, Any]) -> "EmlPackage":
        self._require(PackageState.HAS_EML, "with_dataset() requires the EML root section; call with_eml() first")
        self._dataset_metadata = dict(section)
        self._state = PackageState.HAS_DATASET
        return self

    def with_additional_metadata(
        self,
        blocks: Iterable[AdditionalMetadataBlock | Mapping[str, Any]],
    ) -> "EmlPackage":
        if self._state is PackageState.FINALIZED:
            raise EmlPackageStateError("Cannot add additional metadata to a package that has been built")
        self._additional_metadata.extend(_as_block(block) for block in blocks)
        return self

    def with_related_projects(self, sections: Iterable[Mapping[str, Any]]) -> "EmlPackage":
        self._require(
            PackageState.HAS_DATASET,
            "with_related_projects() requires the dataset section; call with_dataset() first",
        )
        self._related_projects.extend(dict(section) for section in sections)
        return self

    def build(self) -> str:
        """Merge the sections and render the XML document."""
        if self._state is PackageState.FINALIZED and self._document is not None:
            return self._document
        self._require(PackageState.HAS_DATASET, "build() requires the dataset section; call with_dataset() first")
        self._check_references()
        document = render_xml(self._compose())
        self._document = document
        self._state = PackageState.FINALIZED
        LOGGER.debug(
            "eml.package.built",
            package_id=self.package_id,
            related_projects=len(self._related_projects),
            additional_metadata=len(self._additional_metadata),
        )
        return document

    def __str__(self) -> str:
        return self.build()

    def _require(self, expected: PackageState, message: str) -> None:
        if self._state is not expected:
            raise EmlPackageStateError(f"{message} (package state: {self._state.value})")

    def _compose(self) -> dict[str, Any]:
        dataset = dict(self._dataset_metadata or {})
        if self._related_projects:
            project = dict(dataset.get("project") or {})
            project["relatedProject"] = list(self._related_projects)
            dataset["project"] = project
        root: dict[str, Any] = {**(self._eml_metadata or {}), "dataset": dataset}
        if self._additional_metadata:
            root["additionalMetadata"] = [block.as_dict() for block in self._additional_metadata]
        return {ROOT_TAG: root}

    def _check_references(self) -> None:
        known = {self.package_id}
        known.update(str(section.get("@id")) for section in self._related_projects if section.get("@id"))
        dangling = sorted({block.describes for block in self._additional_metadata} - known)
        if dangling:
            raise DanglingReferenceError(
                f"Additional metadata describes ids that are not in the document: {', '.join(dangling)}"
            )


def _as_block(block: AdditionalMetadataBlock | Mapping[str, Any]) -> AdditionalMetadataBlock:
    if isinstance(block, AdditionalMetadataBlock):
        return block
    return AdditionalMetadataBlock(describes=str(block["describes"]), metadata=block["metadata"])


# Rendering -----------------------------------------------------------------------


def render_xml(tree: Mapping[str, Any]) -> str:
    """Render a single-rooted mapping tree to an XML string.

    Conventions: ``@name`` keys are attributes, ``#text`` is element text, a
    list value repeats its element, ``None`` values are dropped and booleans
    render as ``true``/``false``. Namespace prefixes are declared through
    ``@xmlns:<prefix>`` attributes on the root element.
    """
    if len(tree) != 1:
        raise ValueError("An XML tree must have exactly one root element")
    ((tag, body),) = tree.items()
    if not isinstance(body, Mapping):
        body = {"#text": body}
    nsmap = {key[len("@xmlns:"):]: str(uri) for key, uri in body.items() if key.startswith("@xmlns:")}
    root = etree.Element(_qualify(tag, nsmap), nsmap=nsmap or None)
    _fill(root, body, nsmap)
    return XML_DECLARATION + etree.tostring(root, encoding="unicode")


def _fill(element: etree._Element, value: Any, nsmap: Mapping[str, str]) -> None:
    if not isinstance(value, Mapping):
        element.text = _format_value(value)
        return
    for key, item in value.items():
        if item is None:
            continue
        if key.startswith("@"):
            if key.startswith("@xmlns"):
                continue
            element.set(_qualify(key[1:], nsmap), _format_value(item))
        elif key == "#text":
            element.text = _format_value(item)
        else:
            entries = item if isinstance(item, (list, tuple)) else [item]
            for entry in entries:
                if entry is None:
                    continue
                child = etree.SubElement(element, _qualify(key, nsmap))
                _fill(child, entry, nsmap)


def _qualify(name: str, nsmap: Mapping[str, str]) -> str:
    if ":" not in name:
        return name
    prefix, local = name.split(":", 1)
    if prefix == "xml":
        return f"{{{XML_NAMESPACE}}}{local}"
    uri = nsmap.get(prefix)
    if uri is None:
        raise ValueError(f"Undeclared namespace prefix in {name!r}")
    return f"{{{uri}}}{local}"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return XML_ILLEGAL_CHARS.sub("", str(value))
