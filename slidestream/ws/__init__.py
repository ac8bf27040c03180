"""WebSocket delivery of generation events.

The stream server lives in ``slidestream.ws.server`` and is imported
explicitly, since it depends on the job supervisor.
"""

from .events import SlideEvents
from .events import create_event
from .registry import ChannelRegistry
from .utils import close_websocket_safely
from .utils import get_websocket_info
from .utils import is_websocket_closed

__all__ = [
    "ChannelRegistry",
    "SlideEvents",
    "close_websocket_safely",
    "create_event",
    "get_websocket_info",
    "is_websocket_closed",
]
