"""Page revalidation hooks for the web layer."""

from .revalidation import RevalidationEvent, RevalidationService, revalidation_service

__all__ = [
    "RevalidationEvent",
    "RevalidationService",
    "revalidation_service",
]
