"""Builders for the EML root, dataset, project and related-project sections.

Every builder is a pure function over a slice of the aggregated source. The
returned mappings follow the renderer conventions used by
:func:`eml_compiler.eml.package.render_xml`: ``@name`` keys become attributes,
``#text`` becomes element text and lists become repeated elements. Builders
for optional sections return ``None`` when their backing data is empty so the
caller can leave the element out entirely.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from eml_compiler.codes.resolver import (
    ECOLOGICAL_SEASONS,
    FIELD_METHODS,
    INTENDED_OUTCOMES,
    VANTAGE_CODES,
    CodeTableResolver,
    resolve_many,
)
from eml_compiler.core.constants import EML_LANGUAGE, EML_NAMESPACES, NOT_SUPPLIED, EmlConstants
from eml_compiler.core.exceptions import MissingPackageIdError
from eml_compiler.core.models import (
    Coordinator,
    DateValue,
    FundingSource,
    Location,
    MetadataSource,
    PurposeAndMethodology,
    SurveyRecord,
    SurveySource,
    TaxonRecord,
)
from eml_compiler.geometry import bounding_box, extract_rings, synthesize_polygon

POINT_OF_CONTACT = "pointOfContact"


# Root and dataset ---------------------------------------------------------------


def build_eml_section(package_id: str | None, constants: EmlConstants) -> dict[str, Any]:
    """Return the ``eml:eml`` root attributes and the access section."""
    if not package_id:
        raise MissingPackageIdError("A package id is required to build the EML root section")
    return {
        "@packageId": f"urn:uuid:{package_id}",
        "@system": constants.provider_url,
        **EML_NAMESPACES,
        "access": {
            "@authSystem": constants.security_provider_url,
            "@order": "allowFirst",
            "allow": {"principal": "public", "permission": "read"},
        },
    }


def build_dataset_section(
    source: MetadataSource,
    constants: EmlConstants,
    *,
    pub_date: date,
) -> dict[str, Any]:
    project = source.project
    return {
        "@system": constants.provider_url,
        "@id": source.package_id,
        "title": project.name,
        "creator": get_dataset_creator(project.coordinator),
        "metadataProvider": {
            "organizationName": constants.organization_name,
            "onlineUrl": constants.organization_url,
        },
        "pubDate": pub_date.isoformat(),
        "language": EML_LANGUAGE,
        "intellectualRights": {"para": constants.intellectual_rights},
        "contact": get_project_contact(project.coordinator),
        "project": build_project_section(source, constants),
    }


def build_project_section(source: MetadataSource, constants: EmlConstants) -> dict[str, Any]:
    project = source.project
    section: dict[str, Any] = {
        "@id": project.uuid,
        "@system": constants.provider_url,
        "title": project.name,
        "personnel": get_project_personnel(project.coordinator),
        "abstract": {
            "section": [
                {"title": "Objectives", "para": project.objectives},
                {"title": "Caveats", "para": project.caveats or NOT_SUPPLIED},
            ]
        },
    }
    funding = build_funding(project.funding_sources)
    if funding:
        section["funding"] = funding
    section["studyAreaDescription"] = build_study_area(
        build_geographic_coverage(project.location),
        build_temporal_coverage(project.start_date, project.end_date),
    )
    return section


# People -------------------------------------------------------------------------


def get_dataset_creator(coordinator: Coordinator) -> dict[str, Any]:
    if coordinator.share_contact_details:
        return _compact(
            {
                "individualName": _individual_name(coordinator.first_name, coordinator.last_name),
                "organizationName": coordinator.coordinator_agency,
                "electronicMailAddress": coordinator.email_address,
            }
        )
    return {"organizationName": coordinator.coordinator_agency}


def get_project_contact(coordinator: Coordinator) -> dict[str, Any]:
    if coordinator.share_contact_details:
        return _compact(
            {
                "individualName": _individual_name(coordinator.first_name, coordinator.last_name),
                "organizationName": coordinator.coordinator_agency,
                "electronicMailAddress": coordinator.email_address,
            }
        )
    return {"organizationName": coordinator.coordinator_agency}


def get_project_personnel(coordinator: Coordinator) -> list[dict[str, Any]]:
    if coordinator.share_contact_details:
        return [{**get_project_contact(coordinator), "role": POINT_OF_CONTACT}]
    return [{"organizationName": coordinator.coordinator_agency, "role": POINT_OF_CONTACT}]


def get_survey_personnel(survey: SurveyRecord) -> list[dict[str, Any]]:
    return [
        _compact(
            {
                "individualName": _individual_name(survey.biologist_first_name, survey.biologist_last_name),
                "role": POINT_OF_CONTACT,
            }
        )
    ]


def _individual_name(given: str | None, surname: str | None) -> dict[str, Any] | None:
    name = _compact({"givenName": given, "surName": surname})
    return name or None


# Funding and coverage -----------------------------------------------------------


def build_funding(funding_sources: Sequence[FundingSource]) -> dict[str, Any] | None:
    """Return the funding section, or ``None`` when there are no sources."""
    if not funding_sources:
        return None
    return {
        "section": [
            {
                "title": "Agency Name",
                "para": item.agency_name,
                "section": _titled_sections(
                    [
                        ("Funding Agency Project ID", item.agency_project_id),
                        ("Investment Action/Category", item.investment_action_category_name),
                        ("Funding Amount", item.funding_amount),
                        ("Funding Start Date", make_eml_date(item.start_date)),
                        ("Funding End Date", make_eml_date(item.end_date)),
                    ]
                ),
            }
            for item in funding_sources
        ]
    }


def build_temporal_coverage(start_date: DateValue, end_date: DateValue | None) -> dict[str, Any]:
    begin = make_eml_date(start_date)
    if not end_date:
        return {"singleDateTime": {"calendarDate": begin}}
    return {
        "rangeOfDates": {
            "beginDate": {"calendarDate": begin},
            "endDate": {"calendarDate": make_eml_date(end_date)},
        }
    }


def build_geographic_coverage(location: Location) -> dict[str, Any] | None:
    """Return the geographic coverage for a location, or ``None`` without geometry."""
    if not location.geometry:
        return None
    features = [synthesize_polygon(feature) for feature in location.geometry]
    west, south, east, north = bounding_box(features)
    return {
        "geographicDescription": location.description or NOT_SUPPLIED,
        "boundingCoordinates": {
            "westBoundingCoordinate": west,
            "eastBoundingCoordinate": east,
            "northBoundingCoordinate": north,
            "southBoundingCoordinate": south,
        },
        "datasetGPolygon": [
            {
                "datasetGPolygonOuterGRing": {
                    "gRingPoint": [
                        {"gRingLatitude": lat, "gRingLongitude": lon}
                        for lon, lat in extract_rings(feature)
                    ]
                }
            }
            for feature in features
        ],
    }


def build_taxonomic_coverage(
    focal_species: Sequence[int | str],
    records: Iterable[TaxonRecord],
    constants: EmlConstants,
) -> dict[str, Any] | None:
    """Map matched taxon records, in requested order; unmatched ids are dropped."""
    by_id = {record.taxon_id: record for record in records}
    classifications: list[dict[str, Any]] = []
    for taxon_id in dict.fromkeys(str(item) for item in focal_species):
        record = by_id.get(taxon_id)
        if record is None:
            continue
        classifications.append(
            _compact(
                {
                    "taxonRankName": record.rank_name,
                    "taxonRankValue": record.scientific_name,
                    "commonName": record.common_name,
                    "taxonId": {
                        "@provider": constants.taxonomic_provider_url,
                        "#text": record.code or record.taxon_id,
                    },
                }
            )
        )
    if not classifications:
        return None
    return {"taxonomicClassification": classifications}


def build_study_area(
    geographic: Mapping[str, Any] | None,
    temporal: Mapping[str, Any],
    taxonomic: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    coverage: dict[str, Any] = {}
    if geographic:
        coverage["geographicCoverage"] = geographic
    coverage["temporalCoverage"] = temporal
    if taxonomic:
        coverage["taxonomicCoverage"] = taxonomic
    return {"coverage": coverage}


# Surveys ------------------------------------------------------------------------


def build_design_description(
    methodology: PurposeAndMethodology,
    codes: CodeTableResolver,
) -> dict[str, Any] | None:
    sections = _titled_sections(
        [
            ("Field Method", codes.resolve(FIELD_METHODS, methodology.field_method_id)),
            ("Ecological Season", codes.resolve(ECOLOGICAL_SEASONS, methodology.ecological_season_id)),
        ]
    )
    vantage_codes = resolve_many(codes, VANTAGE_CODES, methodology.vantage_code_ids)
    if vantage_codes:
        sections.append(
            {
                "title": "Vantage Codes",
                "para": {"itemizedlist": {"listitem": [{"para": name} for name in vantage_codes]}},
            }
        )
    if not sections:
        return None
    return {"description": {"section": sections}}


def build_survey_project_section(
    survey_source: SurveySource,
    taxa: Iterable[TaxonRecord],
    constants: EmlConstants,
    codes: CodeTableResolver,
) -> dict[str, Any]:
    """Return the related-project block describing one survey."""
    survey = survey_source.survey
    methodology = survey.purpose_and_methodology
    section: dict[str, Any] = {
        "@id": survey.uuid,
        "@system": constants.provider_url,
        "title": survey.name,
        "personnel": get_survey_personnel(survey),
        "abstract": {
            "section": _titled_sections(
                [
                    ("Intended Outcomes", codes.resolve(INTENDED_OUTCOMES, methodology.intended_outcome_id)),
                    ("Additional Details", methodology.additional_details or NOT_SUPPLIED),
                ]
            )
        },
    }
    funding = build_funding(survey.funding_sources)
    if funding:
        section["funding"] = funding
    section["studyAreaDescription"] = build_study_area(
        build_geographic_coverage(survey.location),
        build_temporal_coverage(survey.start_date, survey.end_date),
        build_taxonomic_coverage(survey.focal_species, taxa, constants),
    )
    design = build_design_description(methodology, codes)
    if design:
        section["designDescription"] = design
    return section


# Helpers ------------------------------------------------------------------------


def make_eml_date(value: DateValue | None) -> str | None:
    """Format a date as ``YYYY-MM-DD``; aware datetimes are normalised to UTC first."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    return value.isoformat()


def _titled_sections(pairs: Iterable[tuple[str, Any]]) -> list[dict[str, Any]]:
    return [{"title": title, "para": para} for title, para in pairs if para is not None and para != ""]


def _compact(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None and value != ""}
