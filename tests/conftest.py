"""Pytest configuration and shared fixtures."""

from typing import Callable

import pytest

from slidestream.config import ImageSettings, LLMSettings, Settings
from slidestream.history import InMemoryChatHistory
from slidestream.jobs import JobSupervisor
from slidestream.pipeline import SlideGenerationPipeline
from slidestream.ws.registry import ChannelRegistry
from tests.fakes import ScriptedContentModel


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        llm_settings=LLMSettings(api_key="test-key"),
        image_settings=ImageSettings(api_token=""),
        slide_delay=0,
        push_timeout=1.0,
        stream_base_url="ws://stream.test:8081",
        max_active_jobs=0,
        history_dir=None,
    )


@pytest.fixture
def registry() -> ChannelRegistry:
    return ChannelRegistry(push_timeout=1.0)


@pytest.fixture
def history() -> InMemoryChatHistory:
    store = InMemoryChatHistory()
    store.add(
        "conv-1",
        [
            {"role": "user", "content": "Explain Rust ownership."},
            {"role": "assistant", "content": "Each value has a single owner."},
        ],
    )
    return store


@pytest.fixture
def content_model() -> ScriptedContentModel:
    return ScriptedContentModel()


@pytest.fixture
def make_pipeline(registry, history, test_settings) -> Callable[..., SlideGenerationPipeline]:
    def _make(content_model=None, image_model=None, settings=None) -> SlideGenerationPipeline:
        return SlideGenerationPipeline(
            content_model=content_model or ScriptedContentModel(),
            registry=registry,
            history=history,
            image_model=image_model,
            settings=settings or test_settings,
        )

    return _make


@pytest.fixture
def pipeline(make_pipeline, content_model) -> SlideGenerationPipeline:
    return make_pipeline(content_model=content_model)


@pytest.fixture
async def supervisor(pipeline, test_settings):
    supervisor = JobSupervisor(pipeline, settings=test_settings)
    yield supervisor
    await supervisor.shutdown()
