"""Aggregation of a project's metadata graph from the source provider."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Mapping, Protocol, Sequence, TypeVar

from eml_compiler.core.config import Settings, get_settings
from eml_compiler.core.logging import get_logger
from eml_compiler.core.models import MetadataSource, ProjectRecord, SurveyRecord, SurveySource

LOGGER = get_logger(__name__)

AttachmentDetails = Sequence[Mapping[str, Any]]

T = TypeVar("T")


class SourceProvider(Protocol):
    """Read-only access to persisted project and survey records."""

    async def get_project(self, project_id: int) -> ProjectRecord: ...

    async def get_project_attachments(self, project_id: int) -> AttachmentDetails: ...

    async def get_project_report_attachments(self, project_id: int) -> AttachmentDetails: ...

    async def get_survey_ids(self, project_id: int) -> Sequence[int]: ...

    async def get_survey(self, survey_id: int) -> SurveyRecord: ...

    async def get_survey_attachments(self, survey_id: int) -> AttachmentDetails: ...

    async def get_survey_report_attachments(self, survey_id: int) -> AttachmentDetails: ...


class SourceLoader:
    """Builds a fresh :class:`MetadataSource` for one compilation request.

    Independent fetches run concurrently; each one fills a disjoint field of
    the result, which is only assembled once every fetch has completed.
    Provider errors propagate to the caller unchanged.
    """

    def __init__(self, provider: SourceProvider, settings: Settings | None = None) -> None:
        self._provider = provider
        self._settings = settings or get_settings()

    async def load(self, project_id: int, *, survey_ids: Sequence[int] | None = None) -> MetadataSource:
        """Load a project and its surveys.

        ``survey_ids`` restricts the surveys to the listed ids; ``None`` keeps
        all of them and an empty sequence keeps none.
        """
        LOGGER.info("eml.sources.load", project_id=project_id)
        project, attachments, report_attachments, all_survey_ids = await gather_or_cancel(
            self._provider.get_project(project_id),
            self._provider.get_project_attachments(project_id),
            self._provider.get_project_report_attachments(project_id),
            self._provider.get_survey_ids(project_id),
        )
        included = _filter_survey_ids(all_survey_ids, survey_ids)
        semaphore = asyncio.Semaphore(max(1, self._settings.max_concurrency))
        surveys = await gather_or_cancel(*(self._load_survey(survey_id, semaphore) for survey_id in included))
        LOGGER.info(
            "eml.sources.loaded",
            project_id=project_id,
            survey_count=len(surveys),
            attachment_count=len(attachments or ()),
            report_attachment_count=len(report_attachments or ()),
        )
        return MetadataSource(
            project=project,
            attachments=tuple(attachments or ()),
            report_attachments=tuple(report_attachments or ()),
            surveys=tuple(surveys),
        )

    async def _load_survey(self, survey_id: int, semaphore: asyncio.Semaphore) -> SurveySource:
        async with semaphore:
            survey, attachments, report_attachments = await gather_or_cancel(
                self._provider.get_survey(survey_id),
                self._provider.get_survey_attachments(survey_id),
                self._provider.get_survey_report_attachments(survey_id),
            )
        return SurveySource(
            survey=survey,
            attachments=tuple(attachments or ()),
            report_attachments=tuple(report_attachments or ()),
        )


def _filter_survey_ids(all_ids: Sequence[int], requested: Sequence[int] | None) -> list[int]:
    if requested is None:
        return list(all_ids)
    wanted = set(requested)
    return [survey_id for survey_id in all_ids if survey_id in wanted]


async def gather_or_cancel(*awaitables: Awaitable[T]) -> list[T]:
    """Await everything concurrently; the first failure cancels the rest and is re-raised as is."""
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(_awaited(item)) for item in awaitables]
    except BaseExceptionGroup as errors:
        raise _first_leaf(errors) from None
    return [task.result() for task in tasks]


async def _awaited(item: Awaitable[T]) -> T:
    return await item


def _first_leaf(errors: BaseExceptionGroup) -> BaseException:
    error: BaseException = errors
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error
