"""Additional-metadata blocks attached to the project and its surveys."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from eml_compiler.codes.resolver import (
    ACTIVITY,
    FIRST_NATIONS,
    IUCN_LEVEL_1,
    IUCN_LEVEL_2,
    IUCN_LEVEL_3,
    PROJECT_TYPE,
    CodeTableResolver,
    resolve_many,
)
from eml_compiler.core.models import (
    AdditionalMetadataBlock,
    IucnClassification,
    MetadataSource,
    ProjectRecord,
    SurveySource,
)


def get_project_additional_metadata(
    source: MetadataSource,
    codes: CodeTableResolver,
) -> list[AdditionalMetadataBlock]:
    """Collect the project-level blocks, skipping categories with no data."""
    project = source.project
    package_id = source.package_id
    blocks = [
        project_type_metadata(project, codes),
        project_activities_metadata(project, codes),
        iucn_metadata(project, codes),
        stakeholder_partnerships_metadata(project),
        first_nation_partnerships_metadata(project, codes),
        attachments_metadata(package_id, "projectAttachments", "projectAttachment", source.attachments),
        attachments_metadata(
            package_id,
            "projectReportAttachments",
            "projectReportAttachment",
            source.report_attachments,
        ),
    ]
    return [block for block in blocks if block is not None]


def get_survey_additional_metadata(surveys: Sequence[SurveySource]) -> list[AdditionalMetadataBlock]:
    """Collect survey-level blocks, grouped by category across surveys."""
    blocks: list[AdditionalMetadataBlock | None] = []
    for survey_source in surveys:
        blocks.extend(proprietor_metadata(survey_source))
    for survey_source in surveys:
        blocks.append(
            AdditionalMetadataBlock(
                describes=survey_source.package_id,
                metadata={
                    "surveyedAllAreas": survey_source.survey.purpose_and_methodology.surveyed_all_areas
                },
            )
        )
    for survey_source in surveys:
        blocks.append(
            attachments_metadata(
                survey_source.package_id,
                "surveyAttachments",
                "surveyAttachment",
                survey_source.attachments,
            )
        )
    for survey_source in surveys:
        blocks.append(
            attachments_metadata(
                survey_source.package_id,
                "surveyReportAttachments",
                "surveyReportAttachment",
                survey_source.report_attachments,
            )
        )
    return [block for block in blocks if block is not None]


def project_type_metadata(project: ProjectRecord, codes: CodeTableResolver) -> AdditionalMetadataBlock | None:
    name = codes.resolve(PROJECT_TYPE, project.project_type)
    if not name:
        return None
    return AdditionalMetadataBlock(
        describes=project.uuid,
        metadata={"projectTypes": {"projectType": name}},
    )


def project_activities_metadata(project: ProjectRecord, codes: CodeTableResolver) -> AdditionalMetadataBlock | None:
    names = resolve_many(codes, ACTIVITY, project.activities)
    if not names:
        return None
    return AdditionalMetadataBlock(
        describes=project.uuid,
        metadata={"projectActivities": {"projectActivity": [{"name": name} for name in names]}},
    )


def iucn_metadata(project: ProjectRecord, codes: CodeTableResolver) -> AdditionalMetadataBlock | None:
    actions = [
        action
        for action in (_iucn_action(item, codes) for item in project.iucn_classifications)
        if action
    ]
    if not actions:
        return None
    return AdditionalMetadataBlock(
        describes=project.uuid,
        metadata={"IUCNConservationActions": {"IUCNConservationAction": actions}},
    )


def _iucn_action(item: IucnClassification, codes: CodeTableResolver) -> dict[str, str]:
    levels = {
        "IUCNConservationActionLevel1Classification": codes.resolve(IUCN_LEVEL_1, item.classification),
        "IUCNConservationActionLevel2SubClassification": codes.resolve(IUCN_LEVEL_2, item.sub_classification1),
        "IUCNConservationActionLevel3SubClassification": codes.resolve(IUCN_LEVEL_3, item.sub_classification2),
    }
    return {key: value for key, value in levels.items() if value}


def stakeholder_partnerships_metadata(project: ProjectRecord) -> AdditionalMetadataBlock | None:
    names = [name for name in project.partnerships.stakeholder_partnerships if name]
    if not names:
        return None
    return AdditionalMetadataBlock(
        describes=project.uuid,
        metadata={"stakeholderPartnerships": {"stakeholderPartnership": [{"name": name} for name in names]}},
    )


def first_nation_partnerships_metadata(
    project: ProjectRecord,
    codes: CodeTableResolver,
) -> AdditionalMetadataBlock | None:
    names = resolve_many(codes, FIRST_NATIONS, project.partnerships.indigenous_partnerships)
    if not names:
        return None
    return AdditionalMetadataBlock(
        describes=project.uuid,
        metadata={"firstNationPartnerships": {"firstNationPartnership": [{"name": name} for name in names]}},
    )


def attachments_metadata(
    describes: str,
    group_tag: str,
    item_tag: str,
    attachments: Sequence[Mapping[str, Any]],
) -> AdditionalMetadataBlock | None:
    if not attachments:
        return None
    return AdditionalMetadataBlock(
        describes=describes,
        metadata={group_tag: {item_tag: [dict(item) for item in attachments]}},
    )


def proprietor_metadata(survey_source: SurveySource) -> list[AdditionalMetadataBlock]:
    proprietor = survey_source.survey.proprietor
    if proprietor is None:
        return []
    entries = [
        ("proprietaryDataCategory", proprietor.proprietor_type_name),
        ("proprietorName", proprietor.proprietor_name),
        ("proprietaryDataCategoryRationale", proprietor.category_rationale),
        ("dataSharingAgreementRequired", proprietor.disa_required),
    ]
    return [
        AdditionalMetadataBlock(describes=survey_source.package_id, metadata={key: value})
        for key, value in entries
        if value is not None and value != ""
    ]
