"""WebSocket utility functions for cross-version compatibility."""

from typing import Any, Dict

from websockets.protocol import State

from slidestream.logger import logger


def is_websocket_closed(websocket: Any) -> bool:
    """Check if a WebSocket connection is closed in a version-compatible way.

    Connections from the current websockets API expose ``state``; older ones
    expose a ``closed`` property; anything else is judged by ``close_code``.

    Args:
        websocket: The WebSocket connection to check

    Returns:
        True if the connection cannot accept messages, False otherwise
    """
    state = getattr(websocket, "state", None)
    if isinstance(state, State):
        return state is not State.OPEN

    if hasattr(websocket, "closed"):
        return bool(websocket.closed)

    return getattr(websocket, "close_code", None) is not None


async def close_websocket_safely(websocket: Any, code: int = 1000, reason: str = "") -> None:
    """Close a WebSocket connection, ignoring errors from already-closed sockets."""
    try:
        if not is_websocket_closed(websocket):
            await websocket.close(code, reason)
    except Exception as e:
        logger.debug(f"Error closing websocket: {e}")


def get_websocket_info(websocket: Any) -> Dict[str, Any]:
    """Get information about a WebSocket connection for debugging."""
    info = {
        "closed": is_websocket_closed(websocket),
        "remote_address": getattr(websocket, "remote_address", None),
    }
    if getattr(websocket, "close_code", None) is not None:
        info["close_code"] = websocket.close_code
    if hasattr(websocket, "state"):
        info["state"] = str(websocket.state)
    return info
