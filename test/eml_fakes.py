"""In-memory collaborators shared by the EML tests."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Sequence

from eml_compiler.codes import CodeTables
from eml_compiler.core.config import Settings
from eml_compiler.core.models import (
    Coordinator,
    FundingSource,
    IucnClassification,
    Location,
    ProjectRecord,
    PurposeAndMethodology,
    SurveyRecord,
    TaxonRecord,
)

PROJECT_UUID = "1116c94a-8cd5-480d-a1f3-dac794e57c05"
SURVEY_UUID = "69b506d1-3a50-4a39-b4c7-190bd0b34b96"

SQUARE_FEATURE = {
    "type": "Feature",
    "properties": {},
    "geometry": {
        "type": "Polygon",
        "coordinates": [
            [
                [-121.904297, 50.930738],
                [-121.904297, 51.971346],
                [-120.19043, 51.971346],
                [-120.19043, 50.930738],
                [-121.904297, 50.930738],
            ]
        ],
    },
}

CODE_SETS = {
    "project_type": [{"id": 1, "name": "Aquatic Habitat"}],
    "activity": [{"id": 1, "name": "Habitat Protection"}, {"id": 2, "name": "Monitoring"}],
    "iucn_conservation_action_level_1_classification": [{"id": 1, "name": "Level1"}],
    "iucn_conservation_action_level_2_subclassification": [{"id": 2, "name": "Level2"}],
    "iucn_conservation_action_level_3_subclassification": [{"id": 3, "name": "Level3"}],
    "first_nations": [{"id": 5, "name": "Acho Dene Koe First Nation"}],
    "field_methods": [{"id": 1, "name": "Call Playback"}],
    "ecological_seasons": [{"id": 1, "name": "Spring"}],
    "vantage_codes": [{"id": 1, "name": "Aerial"}, {"id": 2, "name": "Ground"}],
    "intended_outcomes": [{"id": 1, "name": "Habitat Assessment"}],
}


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "provider_url": "https://biohub.example",
        "security_provider_url": "https://auth.example",
        "organization_name": "Example Organisation",
        "organization_url": "https://org.example",
        "intellectual_rights": "CC BY 4.0",
        "taxonomic_provider_url": "https://taxonomy.example",
        "max_retries": 1,
    }
    values.update(overrides)
    return Settings(**values)


def make_codes() -> CodeTables:
    return CodeTables(CODE_SETS)


def make_coordinator(*, share: bool = True) -> Coordinator:
    return Coordinator(
        coordinator_agency="A Rocha Canada",
        first_name="First Name",
        last_name="Last Name",
        email_address="EMAIL@address.com",
        share_contact_details=share,
    )


def make_project(**overrides: Any) -> ProjectRecord:
    project = ProjectRecord(
        project_id=1,
        uuid=PROJECT_UUID,
        name="Project Name",
        objectives="Objectives",
        coordinator=make_coordinator(),
        start_date="2023-01-01",
        end_date="2023-01-31",
    )
    return replace(project, **overrides)


def make_survey(**overrides: Any) -> SurveyRecord:
    survey = SurveyRecord(
        survey_id=10,
        uuid=SURVEY_UUID,
        name="Survey Name",
        start_date="2023-01-02",
        end_date="2023-01-30",
        biologist_first_name="Bio",
        biologist_last_name="Logist",
        purpose_and_methodology=PurposeAndMethodology(
            intended_outcome_id=1,
            additional_details="Additional Details",
            field_method_id=1,
            ecological_season_id=1,
            vantage_code_ids=(1,),
        ),
    )
    return replace(survey, **overrides)


def make_full_project() -> ProjectRecord:
    return make_project(
        project_type=1,
        activities=(1,),
        funding_sources=(
            FundingSource(
                agency_name="BC Hydro",
                agency_project_id="AGENCY PROJECT ID",
                investment_action_category_name="Not Applicable",
                funding_amount=123456789,
                start_date="2023-01-02",
                end_date="2023-01-30",
            ),
        ),
        location=Location(description="Location Description", geometry=(SQUARE_FEATURE,)),
        iucn_classifications=(IucnClassification(1, 2, 3),),
    )


class FakeSourceProvider:
    def __init__(
        self,
        project: ProjectRecord,
        surveys: Sequence[SurveyRecord] = (),
        *,
        attachments: Sequence[Mapping[str, Any]] = (),
        report_attachments: Sequence[Mapping[str, Any]] = (),
        survey_attachments: Mapping[int, Sequence[Mapping[str, Any]]] | None = None,
        survey_report_attachments: Mapping[int, Sequence[Mapping[str, Any]]] | None = None,
    ) -> None:
        self._project = project
        self._surveys = {survey.survey_id: survey for survey in surveys}
        self._attachments = list(attachments)
        self._report_attachments = list(report_attachments)
        self._survey_attachments = dict(survey_attachments or {})
        self._survey_report_attachments = dict(survey_report_attachments or {})
        self.survey_calls: list[int] = []

    async def get_project(self, project_id: int) -> ProjectRecord:
        if project_id != self._project.project_id:
            raise LookupError(f"Unknown project {project_id}")
        return self._project

    async def get_project_attachments(self, project_id: int) -> list[Mapping[str, Any]]:
        return self._attachments

    async def get_project_report_attachments(self, project_id: int) -> list[Mapping[str, Any]]:
        return self._report_attachments

    async def get_survey_ids(self, project_id: int) -> list[int]:
        return list(self._surveys)

    async def get_survey(self, survey_id: int) -> SurveyRecord:
        self.survey_calls.append(survey_id)
        return self._surveys[survey_id]

    async def get_survey_attachments(self, survey_id: int) -> list[Mapping[str, Any]]:
        return list(self._survey_attachments.get(survey_id, ()))

    async def get_survey_report_attachments(self, survey_id: int) -> list[Mapping[str, Any]]:
        return list(self._survey_report_attachments.get(survey_id, ()))


class FakeTaxonomy:
    def __init__(self, records: Sequence[TaxonRecord] = ()) -> None:
        self._records = {record.taxon_id: record for record in records}
        self.calls: list[list[str]] = []

    async def lookup(self, ids: Sequence[int | str]) -> list[TaxonRecord]:
        requested = [str(item) for item in ids]
        self.calls.append(requested)
        return [self._records[item] for item in requested if item in self._records]


def moose(taxon_id: str = "10") -> TaxonRecord:
    return TaxonRecord(
        taxon_id=taxon_id,
        rank_name="SPECIES",
        scientific_name="Alces americanus",
        common_name="Moose",
        code="M-ALAM",
    )
