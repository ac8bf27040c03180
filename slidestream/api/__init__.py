"""HTTP API for starting slide generation jobs."""

from .server import APIServer

__all__ = ["APIServer"]
