"""Plan-then-fill slide generation pipeline."""

from .extract import extract_json_object
from .extract import find_json_block
from .generator import SlideGenerationPipeline
from .generator import format_transcript

__all__ = [
    "SlideGenerationPipeline",
    "extract_json_object",
    "find_json_block",
    "format_transcript",
]
