"""Public service layer for compiling project EML documents."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Callable, Sequence

from eml_compiler.codes.resolver import CodeTableResolver
from eml_compiler.core.config import Settings, get_settings
from eml_compiler.core.constants import EmlConstants
from eml_compiler.core.logging import bind_compile_context, get_logger
from eml_compiler.core.models import MetadataSource, SurveySource, TaxonRecord
from eml_compiler.taxonomy.client import TaxonomyLookup

from .constants import ConstantsProvider, SettingsConstantsProvider, load_eml_constants
from .metadata import get_project_additional_metadata, get_survey_additional_metadata
from .package import EmlPackage
from .sections import build_dataset_section, build_eml_section, build_survey_project_section
from .sources import SourceLoader, SourceProvider, gather_or_cancel

LOGGER = get_logger(__name__)


class EmlService:
    """Compiles one project, with its surveys, into an EML document."""

    def __init__(
        self,
        provider: SourceProvider,
        taxonomy: TaxonomyLookup,
        codes: CodeTableResolver,
        *,
        constants_provider: ConstantsProvider | None = None,
        settings: Settings | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._settings = settings or get_settings()
        self._loader = SourceLoader(provider, self._settings)
        self._taxonomy = taxonomy
        self._codes = codes
        self._constants_provider = constants_provider or SettingsConstantsProvider(self._settings)
        self._clock = clock

    async def compile(self, project_id: int, *, survey_ids: Sequence[int] | None = None) -> str:
        """Return the EML XML document for ``project_id``."""
        with bind_compile_context(project_id=project_id):
            package = await self.build_project_eml_package(project_id, survey_ids=survey_ids)
            document = package.build()
            LOGGER.info("eml.compile.done", package_id=package.package_id, size=len(document))
        return document

    async def build_project_eml_package(
        self,
        project_id: int,
        *,
        survey_ids: Sequence[int] | None = None,
    ) -> EmlPackage:
        LOGGER.info("eml.compile.start", project_id=project_id)
        source, constants = await gather_or_cancel(
            self._loader.load(project_id, survey_ids=survey_ids),
            load_eml_constants(self._constants_provider),
        )
        taxa = await self._lookup_taxa(source.surveys)

        package = (
            EmlPackage(package_id=source.package_id)
            .with_eml(build_eml_section(source.package_id, constants))
            .with_dataset(build_dataset_section(source, constants, pub_date=self._clock()))
            .with_related_projects(self._build_survey_sections(source, taxa, constants))
            .with_additional_metadata(get_project_additional_metadata(source, self._codes))
            .with_additional_metadata(get_survey_additional_metadata(source.surveys))
        )
        LOGGER.info(
            "eml.compile.assembled",
            project_id=project_id,
            package_id=source.package_id,
            survey_count=len(source.surveys),
            additional_metadata=len(package.additional_metadata),
        )
        return package

    async def _lookup_taxa(self, surveys: Sequence[SurveySource]) -> list[list[TaxonRecord]]:
        async def lookup(survey_source: SurveySource) -> list[TaxonRecord]:
            focal_species = survey_source.survey.focal_species
            if not focal_species:
                return []
            records = await self._taxonomy.lookup(list(focal_species))
            if len(records) < len(set(focal_species)):
                LOGGER.info(
                    "eml.taxonomy.partial",
                    survey_id=survey_source.survey.survey_id,
                    requested=len(set(focal_species)),
                    matched=len(records),
                )
            return records

        return await gather_or_cancel(*(lookup(survey_source) for survey_source in surveys))

    def _build_survey_sections(
        self,
        source: MetadataSource,
        taxa: Sequence[Sequence[TaxonRecord]],
        constants: EmlConstants,
    ) -> list[dict]:
        return [
            build_survey_project_section(survey_source, records, constants, self._codes)
            for survey_source, records in zip(source.surveys, taxa)
        ]


def compile_project_eml(
    project_id: int,
    provider: SourceProvider,
    taxonomy: TaxonomyLookup,
    codes: CodeTableResolver,
    *,
    survey_ids: Sequence[int] | None = None,
    settings: Settings | None = None,
) -> str:
    """Synchronous entry point for callers outside an event loop."""
    service = EmlService(provider, taxonomy, codes, settings=settings)
    return asyncio.run(service.compile(project_id, survey_ids=survey_ids))
