"""Unit tests for JobSupervisor."""

import asyncio

import pytest

from slidestream.exceptions import InvalidStartParams, JobCapacityExceeded
from slidestream.jobs import JobSupervisor
from slidestream.schema import JobState, StartParams
from tests.fakes import FakeChannel, ScriptedContentModel
from tests.helpers import wait_for_condition


@pytest.mark.unit
class TestJobSupervisor:
    """Test cases for JobSupervisor."""

    @pytest.mark.asyncio
    async def test_start_returns_before_generation(self, make_pipeline, test_settings):
        model = ScriptedContentModel(delay=0.2)
        supervisor = JobSupervisor(make_pipeline(content_model=model), settings=test_settings)

        result = supervisor.start(StartParams(topic_text="Rust ownership"))

        assert model.prompts == []
        assert supervisor.get(result.job_id).state == JobState.CREATED
        await supervisor.shutdown()

    @pytest.mark.asyncio
    async def test_stream_address_carries_job_id(self, supervisor: JobSupervisor):
        result = supervisor.start(StartParams(topic_text="Rust ownership"))

        assert result.stream_address == f"ws://stream.test:8081/ws/slides?jobId={result.job_id}"

    @pytest.mark.asyncio
    async def test_job_ids_are_unique(self, supervisor: JobSupervisor):
        ids = {supervisor.start(StartParams(topic_text="Rust ownership")).job_id for _ in range(5)}

        assert len(ids) == 5

    @pytest.mark.parametrize(
        "params",
        [
            StartParams(),
            StartParams(topic_text="   "),
            StartParams(file_path="/tmp/notes.md"),
        ],
    )
    @pytest.mark.asyncio
    async def test_start_rejects_missing_source(self, supervisor: JobSupervisor, params):
        with pytest.raises(InvalidStartParams):
            supervisor.start(params)

        assert supervisor.active_count() == 0

    @pytest.mark.asyncio
    async def test_capacity_limit(self, make_pipeline, test_settings):
        test_settings.max_active_jobs = 1
        model = ScriptedContentModel(delay=0.5)
        supervisor = JobSupervisor(make_pipeline(content_model=model), settings=test_settings)

        supervisor.start(StartParams(topic_text="first"))
        with pytest.raises(JobCapacityExceeded):
            supervisor.start(StartParams(topic_text="second"))

        assert supervisor.active_count() == 1
        await supervisor.shutdown()

    @pytest.mark.asyncio
    async def test_client_disconnect_frees_no_slot(self, make_pipeline, test_settings):
        test_settings.max_active_jobs = 1
        model = ScriptedContentModel(delay=0.5)
        supervisor = JobSupervisor(make_pipeline(content_model=model), settings=test_settings)

        first = supervisor.start(StartParams(topic_text="first"))
        supervisor.cleanup(first.job_id)

        assert supervisor.get(first.job_id) is None
        with pytest.raises(JobCapacityExceeded):
            supervisor.start(StartParams(topic_text="second"))
        assert supervisor.active_count() == 1
        await supervisor.shutdown()

    @pytest.mark.asyncio
    async def test_metadata_removed_after_success(self, supervisor: JobSupervisor, registry):
        result = supervisor.start(StartParams(topic_text="Rust ownership"))
        channel = FakeChannel()
        registry.register(result.job_id, channel)

        await wait_for_condition(lambda: supervisor.get(result.job_id) is None, timeout=2.0)
        await wait_for_condition(lambda: supervisor.active_count() == 0, timeout=2.0)
        await registry.drain()
        assert result.job_id not in registry
        assert channel.types()[-1] == "done"

    @pytest.mark.asyncio
    async def test_metadata_removed_after_failure(self, make_pipeline, test_settings, registry):
        model = ScriptedContentModel(plan_response="not a plan")
        supervisor = JobSupervisor(make_pipeline(content_model=model), settings=test_settings)
        result = supervisor.start(StartParams(topic_text="Rust ownership"))
        channel = FakeChannel()
        registry.register(result.job_id, channel)

        await supervisor.drain(timeout=2.0)
        await registry.drain()

        assert supervisor.get(result.job_id) is None
        assert result.job_id not in registry
        assert channel.types()[-1] == "error"

    @pytest.mark.asyncio
    async def test_concurrent_jobs_are_isolated(self, make_pipeline, test_settings, registry):
        def slide_for(index):
            if index == 1:
                raise RuntimeError("model crashed")
            return '{"title": "ok", "bullets": ["b"]}'

        good = JobSupervisor(make_pipeline(content_model=ScriptedContentModel(delay=0.01)), settings=test_settings)
        bad = JobSupervisor(
            make_pipeline(content_model=ScriptedContentModel(slide_response=slide_for, delay=0.01)),
            settings=test_settings,
        )
        first = good.start(StartParams(topic_text="first topic"))
        second = bad.start(StartParams(topic_text="second topic"))
        first_channel, second_channel = FakeChannel(), FakeChannel()
        registry.register(first.job_id, first_channel)
        registry.register(second.job_id, second_channel)

        await asyncio.gather(good.drain(timeout=2.0), bad.drain(timeout=2.0))
        await registry.drain()

        assert first_channel.types()[-1] == "done"
        assert first_channel.of_type("error") == []
        assert second_channel.types()[-1] == "error"
        assert second_channel.of_type("done") == []
        assert all(event.get("jobId", second.job_id) == second.job_id for event in second_channel.events)

    @pytest.mark.asyncio
    async def test_state_tracks_progress(self, make_pipeline, test_settings):
        model = ScriptedContentModel(delay=0.2)
        supervisor = JobSupervisor(make_pipeline(content_model=model), settings=test_settings)
        result = supervisor.start(StartParams(topic_text="Rust ownership"))

        await wait_for_condition(
            lambda: supervisor.get(result.job_id).state == JobState.PLANNING, timeout=2.0
        )
        await supervisor.shutdown()

    def test_cleanup_is_idempotent(self, pipeline, test_settings):
        supervisor = JobSupervisor(pipeline, settings=test_settings)

        supervisor.cleanup("never-started")
        supervisor.cleanup("never-started")

        assert supervisor.active_count() == 0

    @pytest.mark.asyncio
    async def test_shutdown_cancels_and_cleans_up(self, make_pipeline, test_settings, registry):
        model = ScriptedContentModel(delay=5.0)
        supervisor = JobSupervisor(make_pipeline(content_model=model), settings=test_settings)
        result = supervisor.start(StartParams(topic_text="Rust ownership"))
        channel = FakeChannel()
        registry.register(result.job_id, channel)
        await wait_for_condition(lambda: model.prompts, timeout=2.0)

        await asyncio.wait_for(supervisor.shutdown(), timeout=2.0)

        assert supervisor.active_count() == 0
        assert result.job_id not in registry
        assert "error" not in channel.types()
