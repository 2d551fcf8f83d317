from __future__ import annotations

import asyncio

import pytest

from eml_compiler.eml.sources import SourceLoader, gather_or_cancel

from eml_fakes import FakeSourceProvider, make_project, make_settings, make_survey

ATTACHMENT = {"file_name": "map.png"}


def _provider() -> FakeSourceProvider:
    return FakeSourceProvider(
        make_project(),
        [make_survey(survey_id=10, uuid="s-10"), make_survey(survey_id=11, uuid="s-11")],
        attachments=[ATTACHMENT],
        survey_attachments={11: [ATTACHMENT]},
    )


def _load(provider: FakeSourceProvider, project_id: int = 1, **kwargs):
    loader = SourceLoader(provider, make_settings(max_concurrency=1))
    return asyncio.run(loader.load(project_id, **kwargs))


def test_load_aggregates_project_and_every_survey() -> None:
    provider = _provider()

    source = _load(provider)

    assert source.package_id == make_project().uuid
    assert source.attachments == (ATTACHMENT,)
    assert source.report_attachments == ()
    assert [item.package_id for item in source.surveys] == ["s-10", "s-11"]
    assert source.surveys[0].attachments == ()
    assert source.surveys[1].attachments == (ATTACHMENT,)


def test_survey_filter_restricts_loaded_surveys() -> None:
    provider = _provider()

    source = _load(provider, survey_ids=[11, 99])

    assert [item.survey.survey_id for item in source.surveys] == [11]
    assert provider.survey_calls == [11]


def test_empty_survey_filter_loads_no_surveys() -> None:
    provider = _provider()

    source = _load(provider, survey_ids=[])

    assert source.surveys == ()
    assert provider.survey_calls == []


def test_provider_errors_propagate() -> None:
    with pytest.raises(LookupError, match="Unknown project 2"):
        _load(_provider(), project_id=2)


class FailingSurveyProvider(FakeSourceProvider):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.cancelled: list[int] = []
        self._slow_survey_started = asyncio.Event()

    async def get_survey(self, survey_id: int):
        if survey_id == 10:
            await self._slow_survey_started.wait()
            raise RuntimeError("survey 10 is corrupt")
        self._slow_survey_started.set()
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled.append(survey_id)
            raise
        return await super().get_survey(survey_id)


def test_failed_survey_cancels_the_remaining_fetches() -> None:
    provider = FailingSurveyProvider(
        make_project(),
        [make_survey(survey_id=10, uuid="s-10"), make_survey(survey_id=11, uuid="s-11")],
    )
    loader = SourceLoader(provider, make_settings(max_concurrency=2))

    with pytest.raises(RuntimeError, match="survey 10 is corrupt"):
        asyncio.run(loader.load(1))

    assert provider.cancelled == [11]


def test_gather_or_cancel_keeps_argument_order() -> None:
    async def value_after(delay: float, value: str) -> str:
        await asyncio.sleep(delay)
        return value

    results = asyncio.run(gather_or_cancel(value_after(0.02, "slow"), value_after(0, "fast")))

    assert results == ["slow", "fast"]
