"""Exception hierarchy for slide generation.

Fatal job conditions (``EmptyInput``, ``PlanParseError``, ``SlideParseError``)
end a run with a single ``error`` event. ``ImageGenerationFailure`` and
``ChannelUnavailable`` are logged and never interrupt a run.
"""


class SlideStreamError(Exception):
    """Base class for all slidestream errors."""


class EmptyInput(SlideStreamError):
    """No usable content could be assembled for a job."""

    def __init__(self, message: str = "No content to build a presentation from"):
        super().__init__(message)


class JSONExtractionError(SlideStreamError):
    """No balanced JSON object could be found in model output."""


class PlanParseError(SlideStreamError):
    """The planning response could not be turned into a presentation plan."""


class SlideParseError(SlideStreamError):
    """A slide response could not be parsed."""

    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"Failed to parse slide {index + 1}: {reason}")


class ImageGenerationFailure(SlideStreamError):
    """The image model failed or returned no URL."""


class ChannelUnavailable(SlideStreamError):
    """A delivery channel could not accept an event."""


class InvalidStartParams(SlideStreamError):
    """A start request carried no usable source."""


class JobCapacityExceeded(SlideStreamError):
    """Too many jobs are running to accept another one."""
