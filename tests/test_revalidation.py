"""Tests for the page revalidation hook."""

import asyncio
from unittest.mock import Mock

import pytest

from imaginify_store.caching.revalidation import RevalidationEvent, RevalidationService


class TestRevalidationService:
    """Test revalidation notifications."""
    
    def test_records_event(self, revalidator):
        """Each request is recorded in order."""
        revalidator.revalidate_path("/")
        revalidator.revalidate_path("/profile", kind="layout")
        
        assert [(e.path, e.kind) for e in revalidator.history] == [("/", "page"), ("/profile", "layout")]
    
    def test_history_is_bounded(self):
        """Only the most recent events are kept; the total keeps counting."""
        service = RevalidationService(history_limit=3)
        for index in range(10):
            service.revalidate_path(f"/page/{index}")

        assert [e.path for e in service.history] == ["/page/7", "/page/8", "/page/9"]
        assert service.get_revalidation_stats()["total_revalidations"] == 10

    def test_sync_listener_receives_event(self, revalidator):
        """Plain listeners are called immediately."""
        listener = Mock()
        revalidator.subscribe(listener)
        
        event = revalidator.revalidate_path("/")
        
        listener.assert_called_once_with(event)
        assert isinstance(event, RevalidationEvent)
    
    def test_failing_listener_is_isolated(self, revalidator):
        """A raising listener neither propagates nor blocks the others."""
        failing = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        revalidator.subscribe(failing)
        revalidator.subscribe(healthy)
        
        revalidator.revalidate_path("/")
        
        healthy.assert_called_once()
        assert revalidator.get_revalidation_stats()["listener_errors"] == 1
    
    def test_unsubscribe(self, revalidator):
        """Removed listeners are no longer notified."""
        listener = Mock()
        revalidator.subscribe(listener)
        revalidator.unsubscribe(listener)
        
        revalidator.revalidate_path("/")
        
        listener.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_async_listener_is_scheduled(self, revalidator):
        """Async listeners run in the background without blocking the caller."""
        seen = []
        
        async def listener(event):
            await asyncio.sleep(0)
            seen.append(event.path)
        
        revalidator.subscribe(listener)
        revalidator.revalidate_path("/")
        assert seen == []
        
        await revalidator.drain()
        assert seen == ["/"]
    
    @pytest.mark.asyncio
    async def test_async_listener_failure_is_counted(self, revalidator):
        """Async listener errors are logged and counted."""
        
        async def listener(event):
            raise RuntimeError("cdn unavailable")
        
        revalidator.subscribe(listener)
        revalidator.revalidate_path("/")
        await revalidator.drain()
        await asyncio.sleep(0)
        
        assert revalidator.get_revalidation_stats()["listener_errors"] == 1
    
    def test_async_listener_without_loop_is_skipped(self):
        """Outside an event loop async listeners are dropped, not raised."""
        service = RevalidationService()
        
        async def listener(event):
            pass
        
        service.subscribe(listener)
        service.revalidate_path("/")
        
        assert service.get_revalidation_stats()["total_revalidations"] == 1
    
    def test_stats(self, revalidator):
        """Stats report distinct paths."""
        revalidator.revalidate_path("/")
        revalidator.revalidate_path("/")
        revalidator.revalidate_path("/profile")
        
        stats = revalidator.get_revalidation_stats()
        
        assert stats["total_revalidations"] == 3
        assert stats["paths"] == ["/", "/profile"]
