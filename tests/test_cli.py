"""
Tests for the CLI
"""

import pytest
from click.testing import CliRunner

from smartmatch import __version__
from smartmatch.main import UNAVAILABLE_MESSAGE, cli

from test_ingest import INTERACTIONS_CSV, USERS_CSV, MATCHES_CSV, SWIPES_CSV


@pytest.fixture
def export_dir(tmp_path):
    export = tmp_path / "export"
    export.mkdir()
    (export / "users.csv").write_text(USERS_CSV)
    (export / "swipes.csv").write_text(SWIPES_CSV)
    (export / "matches.csv").write_text(MATCHES_CSV)
    return export


@pytest.fixture
def runner():
    return CliRunner()


class TestCli:
    """Tests for CLI commands."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["version"], obj={})

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_recommend_writes_reports(self, runner, export_dir, tmp_path):
        output_dir = tmp_path / "out"

        result = runner.invoke(cli, [
            "recommend",
            "-i", str(export_dir),
            "-u", "u_001",
            "--now", "2024-06-12T10:00:00",
            "-o", str(output_dir),
            "-f", "json",
            "--no-cache",
        ], obj={})

        assert result.exit_code == 0, result.output
        assert len(list(output_dir.glob("recommendations_u_001*.json"))) == 1

    def test_recommend_unknown_user(self, runner, export_dir, tmp_path):
        result = runner.invoke(cli, [
            "recommend",
            "-i", str(export_dir),
            "-u", "ghost",
            "-o", str(tmp_path / "out"),
            "--no-cache",
        ], obj={})

        assert result.exit_code == 1
        assert UNAVAILABLE_MESSAGE in result.output

    def test_recommend_bad_now(self, runner, export_dir):
        result = runner.invoke(cli, [
            "recommend", "-i", str(export_dir), "-u", "u_001", "--now", "soon",
        ], obj={})

        assert result.exit_code == 2

    def test_recommend_offset_now_with_interactions(self, runner, export_dir, tmp_path):
        """Test a UTC-offset --now against naive and offset interaction timestamps."""
        (export_dir / "interactions.csv").write_text(
            INTERACTIONS_CSV + "f_001,u_001,view,2024-06-12T11:00:00+02:00\n"
        )

        result = runner.invoke(cli, [
            "recommend",
            "-i", str(export_dir),
            "-u", "u_001",
            "--now", "2024-06-12T10:00:00+00:00",
            "-o", str(tmp_path / "out"),
            "-f", "json",
            "--no-cache",
        ], obj={})

        assert result.exit_code == 0, result.output

    def test_recommend_negative_limit(self, runner, export_dir):
        result = runner.invoke(cli, [
            "recommend", "-i", str(export_dir), "-u", "u_001", "--limit", "-1",
        ], obj={})

        assert result.exit_code == 2

    def test_profile(self, runner, export_dir):
        result = runner.invoke(cli, [
            "profile", "-i", str(export_dir), "-u", "u_001", "--now", "2024-06-12T10:00:00",
        ], obj={})

        assert result.exit_code == 0, result.output
        assert "Behavior Profile" in result.output

    def test_stats(self, runner, export_dir):
        result = runner.invoke(cli, ["stats", "-i", str(export_dir)], obj={})

        assert result.exit_code == 0
        assert "Users" in result.output
