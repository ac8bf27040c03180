"""Image model adapter.

The default implementation runs a pinned model version through the Replicate
predictions API and returns the first output URL.
"""

import asyncio
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import aiohttp

from slidestream.config import ImageSettings, settings
from slidestream.exceptions import ImageGenerationFailure
from slidestream.logger import logger

_TERMINAL_STATUSES = {"succeeded", "failed", "canceled"}


@runtime_checkable
class ImageModel(Protocol):
    """Send an image prompt, get a URL back."""

    async def invoke(self, prompt: str, size: str) -> str:
        ...


def parse_size(size: str) -> tuple[int, int]:
    """Parse ``"WIDTHxHEIGHT"`` into integers."""
    try:
        width, height = (int(part) for part in size.lower().split("x", 1))
    except ValueError as e:
        raise ValueError(f"Invalid image size: {size!r}") from e
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size: {size!r}")
    return width, height


class ReplicateImageModel:
    """Image model backed by the Replicate predictions HTTP API."""

    def __init__(self, image_settings: Optional[ImageSettings] = None, poll_interval: float = 1.0):
        self.settings = image_settings or settings.image_settings
        self.poll_interval = poll_interval

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.api_token}",
            "Content-Type": "application/json",
            "Prefer": "wait",
        }

    async def invoke(self, prompt: str, size: str) -> str:
        if not self.enabled:
            raise ImageGenerationFailure("REPLICATE_API_TOKEN not set")

        width, height = parse_size(size)
        payload = {
            "version": self.settings.model_version,
            "input": {
                "prompt": prompt,
                "width": width,
                "height": height,
                "num_inference_steps": self.settings.inference_steps,
            },
        }
        timeout = aiohttp.ClientTimeout(total=self.settings.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    f"{self.settings.base_url}/predictions", json=payload, headers=self._headers()
                ) as response:
                    if response.status >= 400:
                        error_text = await response.text()
                        raise ImageGenerationFailure(f"Replicate API error ({response.status}): {error_text}")
                    prediction = await response.json()

                prediction = await self._wait_for_completion(session, prediction)
        except aiohttp.ClientError as e:
            raise ImageGenerationFailure(f"Network error during image generation: {e}") from e
        except asyncio.TimeoutError as e:
            raise ImageGenerationFailure("Image generation timed out") from e

        return self._first_output(prediction)

    async def _wait_for_completion(self, session: aiohttp.ClientSession, prediction: Dict[str, Any]) -> Dict[str, Any]:
        """Poll until the prediction reaches a terminal status."""
        poll_url = (prediction.get("urls") or {}).get("get")
        while prediction.get("status") not in _TERMINAL_STATUSES:
            if not poll_url:
                break
            await asyncio.sleep(self.poll_interval)
            async with session.get(poll_url, headers=self._headers()) as response:
                if response.status >= 400:
                    raise ImageGenerationFailure(f"Replicate poll error ({response.status})")
                prediction = await response.json()
            logger.debug(f"Replicate prediction {prediction.get('id')} status={prediction.get('status')}")
        return prediction

    @staticmethod
    def _first_output(prediction: Dict[str, Any]) -> str:
        status = prediction.get("status")
        if status in ("failed", "canceled"):
            raise ImageGenerationFailure(f"Image generation {status}: {prediction.get('error')}")

        output = prediction.get("output")
        if isinstance(output, list) and output:
            return str(output[0])
        if isinstance(output, str) and output:
            return output
        raise ImageGenerationFailure("Image generation failed")
