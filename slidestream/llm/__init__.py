"""Model adapters used by the generation pipeline."""

from .content import ContentModel
from .content import OpenAIContentModel
from .image import ImageModel
from .image import ReplicateImageModel

__all__ = [
    "ContentModel",
    "ImageModel",
    "OpenAIContentModel",
    "ReplicateImageModel",
]
