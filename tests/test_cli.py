"""Tests for CLI functionality."""

import pytest
from typer.testing import CliRunner
from unittest.mock import patch

from imaginify_store import __version__
from imaginify_store.cli import app
from imaginify_store.database.connection import ConnectionManager

from .conftest import make_settings
from .fakes import FakeClient, FakeClientFactory


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def seeded_factory():
    """Client factory whose database already holds one user."""
    client = FakeClient("mongodb://localhost:27017")
    client["imaginify"]["users"].documents.append({
        "_id": "0123456789abcdef01234567",
        "clerkId": "u1",
        "email": "a@b.com",
        "planId": 1,
        "creditBalance": 10,
    })
    
    def build(url, **options):
        return client
    
    build.client = client
    return build


@pytest.fixture
def patched_manager(seeded_factory):
    """Route CLI commands to the seeded in-memory database."""
    with patch(
        "imaginify_store.cli.get_manager",
        side_effect=lambda: ConnectionManager(make_settings(), client_factory=seeded_factory)
    ):
        yield seeded_factory.client


class TestVersionCommand:
    """Test version command."""
    
    def test_version(self, runner):
        """Version prints the package version."""
        result = runner.invoke(app, ["version"])
        
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestSetupCommand:
    """Test setup command."""
    
    def test_setup_creates_indexes(self, runner, patched_manager):
        """Setup creates indexes and closes the client."""
        result = runner.invoke(app, ["setup"])
        
        assert result.exit_code == 0
        assert "Database setup completed" in result.stdout
        assert "unique_clerk_id" in patched_manager["imaginify"]["users"].indexes
        assert patched_manager.closed
    
    def test_setup_without_url_fails(self, runner):
        """Setup exits non-zero when the endpoint is missing."""
        with patch(
            "imaginify_store.cli.get_manager",
            side_effect=lambda: ConnectionManager(make_settings(None), client_factory=FakeClientFactory())
        ):
            result = runner.invoke(app, ["setup"])
        
        assert result.exit_code == 1
        assert "Setup failed" in result.stdout


class TestHealthCommand:
    """Test health command."""
    
    def test_health_json(self, runner, patched_manager):
        """Healthy databases exit zero."""
        result = runner.invoke(app, ["health", "--json"])
        
        assert result.exit_code == 0
        assert "healthy" in result.stdout
    
    def test_health_unreachable(self, runner):
        """Unreachable databases exit non-zero."""
        with patch(
            "imaginify_store.cli.get_manager",
            side_effect=lambda: ConnectionManager(make_settings(None), client_factory=FakeClientFactory())
        ):
            result = runner.invoke(app, ["health"])
        
        assert result.exit_code == 1


class TestUserCommands:
    """Test user inspection commands."""
    
    def test_get_user(self, runner, patched_manager):
        """A stored user is printed."""
        result = runner.invoke(app, ["get-user", "u1"])
        
        assert result.exit_code == 0
        assert "a@b.com" in result.stdout
    
    def test_get_missing_user(self, runner, patched_manager):
        """A missing user exits non-zero."""
        result = runner.invoke(app, ["get-user", "nobody"])
        
        assert result.exit_code == 1
        assert "User not found" in result.stdout
    
    def test_deduct_credits(self, runner, patched_manager):
        """Negative amounts are accepted after '--'."""
        result = runner.invoke(app, ["credits", "u1", "--", "-3"])
        
        assert result.exit_code == 0
        assert "7" in result.stdout
        assert patched_manager["imaginify"]["users"].documents[0]["creditBalance"] == 7
