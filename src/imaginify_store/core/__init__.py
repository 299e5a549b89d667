"""Core infrastructure components."""

from . import constants

__all__ = ["constants"]
