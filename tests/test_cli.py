"""Test the spot-resolve command"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from spot_resolver.cli import cli
from spot_resolver.core.exceptions import AuthError
from spot_resolver.search.assembler import ResultAssembler
from spot_resolver.search.models import LoadType, SearchResponse, UnresolvedTrack


@pytest.fixture
def config_file(temp_dir):
    """Minimal valid config.yaml"""
    path = temp_dir / "config.yaml"
    path.write_text(
        "spotify:\n"
        "  client_id: test_client_id\n"
        "  client_secret: test_client_secret\n",
        encoding="utf-8",
    )
    return path


class TestCli:
    """Test CLI output and exit codes"""

    def test_prints_response_json(self, config_file):
        """Test a loaded response is printed as JSON and exits 0"""
        response = SearchResponse(
            load_type=LoadType.TRACK_LOADED,
            tracks=(UnresolvedTrack(title="Bohemian Rhapsody", author="Queen", duration_ms=354320),),
        )

        with patch("spot_resolver.cli._run", AsyncMock(return_value=response)) as run:
            result = CliRunner().invoke(cli, ["spotify:track:abc", "--config", str(config_file)])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["loadType"] == "TRACK_LOADED"
        assert payload["tracks"][0]["author"] == "Queen"
        assert run.call_args.args[1:] == ("spotify:track:abc", False)

    def test_load_failed_exit_code(self, config_file):
        """Test a LOAD_FAILED response exits 2"""
        response = ResultAssembler().failed("Non existing id")

        with patch("spot_resolver.cli._run", AsyncMock(return_value=response)):
            result = CliRunner().invoke(cli, ["spotify:album:abc", "--config", str(config_file)])

        assert result.exit_code == 2

    def test_resolve_flag(self, config_file):
        """Test --resolve enables eager matching for the run"""
        response = ResultAssembler().no_matches("none")

        with patch("spot_resolver.cli._run", AsyncMock(return_value=response)) as run:
            result = CliRunner().invoke(cli, ["spotify:album:abc", "--config", str(config_file), "--resolve"])

        assert result.exit_code == 0
        assert run.call_args.args[2] is True

    def test_config_error(self, temp_dir, monkeypatch):
        """Test an invalid config exits 1"""
        path = temp_dir / "config.yaml"
        path.write_text("spotify:\n  client_id: ''\n  client_secret: ''\n", encoding="utf-8")
        monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)

        result = CliRunner().invoke(cli, ["spotify:track:abc", "--config", str(path)])

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_auth_error(self, config_file):
        """Test rejected credentials exit 3"""
        with patch("spot_resolver.cli._run", AsyncMock(side_effect=AuthError("Invalid Spotify client."))):
            result = CliRunner().invoke(cli, ["spotify:track:abc", "--config", str(config_file)])

        assert result.exit_code == 3
        assert "Invalid Spotify client." in result.output
