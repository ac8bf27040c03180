"""Wiring of the registry, pipeline, supervisor and servers."""

from dataclasses import dataclass
from typing import Optional

from slidestream.api.server import APIServer
from slidestream.config import Settings, settings as default_settings
from slidestream.history import ChatHistory, InMemoryChatHistory, JsonDirectoryChatHistory
from slidestream.jobs import JobSupervisor
from slidestream.llm.content import ContentModel, OpenAIContentModel
from slidestream.llm.image import ImageModel, ReplicateImageModel
from slidestream.logger import logger
from slidestream.pipeline import SlideGenerationPipeline
from slidestream.ws.registry import ChannelRegistry
from slidestream.ws.server import SlideStreamServer


@dataclass
class SlideStreamApp:
    settings: Settings
    registry: ChannelRegistry
    pipeline: SlideGenerationPipeline
    supervisor: JobSupervisor
    api: APIServer
    stream: SlideStreamServer


def default_history(settings: Settings) -> ChatHistory:
    if settings.history_dir:
        return JsonDirectoryChatHistory(settings.history_dir)
    return InMemoryChatHistory()


def create_app(
    settings: Optional[Settings] = None,
    *,
    content_model: Optional[ContentModel] = None,
    image_model: Optional[ImageModel] = None,
    history: Optional[ChatHistory] = None,
    ws_host: str = "localhost",
    ws_port: int = 8081,
) -> SlideStreamApp:
    """Build a fully wired application; collaborators default to the real providers."""
    settings = settings or default_settings

    if image_model is None and settings.image_settings.enabled:
        image_model = ReplicateImageModel(settings.image_settings)
    if image_model is None:
        logger.info("Image generation disabled (no REPLICATE_API_TOKEN)")

    registry = ChannelRegistry(push_timeout=settings.push_timeout)
    pipeline = SlideGenerationPipeline(
        content_model=content_model or OpenAIContentModel(settings.llm_settings),
        registry=registry,
        history=history or default_history(settings),
        image_model=image_model,
        settings=settings,
    )
    supervisor = JobSupervisor(pipeline, settings=settings)

    return SlideStreamApp(
        settings=settings,
        registry=registry,
        pipeline=pipeline,
        supervisor=supervisor,
        api=APIServer(supervisor, registry),
        stream=SlideStreamServer(registry, supervisor, host=ws_host, port=ws_port),
    )
