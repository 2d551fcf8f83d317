"""Shared data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping

DateValue = date | datetime | str


@dataclass(slots=True, frozen=True)
class Coordinator:
    coordinator_agency: str
    first_name: str | None = None
    last_name: str | None = None
    email_address: str | None = None
    share_contact_details: bool = False


@dataclass(slots=True, frozen=True)
class FundingSource:
    agency_name: str
    agency_project_id: str | None = None
    investment_action_category_name: str | None = None
    funding_amount: int | float | None = None
    start_date: DateValue | None = None
    end_date: DateValue | None = None


@dataclass(slots=True, frozen=True)
class IucnClassification:
    classification: int | None = None
    sub_classification1: int | None = None
    sub_classification2: int | None = None


@dataclass(slots=True, frozen=True)
class Partnerships:
    indigenous_partnerships: tuple[int, ...] = ()
    stakeholder_partnerships: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class Location:
    description: str | None = None
    geometry: tuple[Mapping[str, Any], ...] = ()


@dataclass(slots=True, frozen=True)
class Permit:
    permit_number: str
    permit_type: str


@dataclass(slots=True, frozen=True)
class PurposeAndMethodology:
    intended_outcome_id: int | None = None
    additional_details: str | None = None
    field_method_id: int | None = None
    ecological_season_id: int | None = None
    vantage_code_ids: tuple[int, ...] = ()
    surveyed_all_areas: bool = False


@dataclass(slots=True, frozen=True)
class Proprietor:
    proprietor_type_name: str | None = None
    proprietor_name: str | None = None
    category_rationale: str | None = None
    disa_required: bool = False


@dataclass(slots=True, frozen=True)
class ProjectRecord:
    project_id: int
    uuid: str
    name: str
    objectives: str
    coordinator: Coordinator
    start_date: DateValue
    end_date: DateValue | None = None
    caveats: str | None = None
    comments: str | None = None
    project_type: int | None = None
    activities: tuple[int, ...] = ()
    funding_sources: tuple[FundingSource, ...] = ()
    location: Location = field(default_factory=Location)
    iucn_classifications: tuple[IucnClassification, ...] = ()
    partnerships: Partnerships = field(default_factory=Partnerships)


@dataclass(slots=True, frozen=True)
class SurveyRecord:
    survey_id: int
    uuid: str
    name: str
    start_date: DateValue
    end_date: DateValue | None = None
    biologist_first_name: str | None = None
    biologist_last_name: str | None = None
    focal_species: tuple[int, ...] = ()
    permits: tuple[Permit, ...] = ()
    funding_sources: tuple[FundingSource, ...] = ()
    location: Location = field(default_factory=Location)
    purpose_and_methodology: PurposeAndMethodology = field(default_factory=PurposeAndMethodology)
    proprietor: Proprietor | None = None


@dataclass(slots=True, frozen=True)
class SurveySource:
    survey: SurveyRecord
    attachments: tuple[Mapping[str, Any], ...] = ()
    report_attachments: tuple[Mapping[str, Any], ...] = ()

    @property
    def package_id(self) -> str:
        return self.survey.uuid


@dataclass(slots=True, frozen=True)
class MetadataSource:
    """Aggregated metadata graph for one project and its surveys."""

    project: ProjectRecord
    attachments: tuple[Mapping[str, Any], ...] = ()
    report_attachments: tuple[Mapping[str, Any], ...] = ()
    surveys: tuple[SurveySource, ...] = ()

    @property
    def package_id(self) -> str:
        return self.project.uuid


@dataclass(slots=True, frozen=True)
class TaxonRecord:
    taxon_id: str
    rank_name: str | None = None
    scientific_name: str | None = None
    common_name: str | None = None
    code: str | None = None


@dataclass(slots=True, frozen=True)
class AdditionalMetadataBlock:
    describes: str
    metadata: Mapping[str, Any]

    def as_dict(self) -> dict[str, Any]:
        return {"describes": self.describes, "metadata": self.metadata}
