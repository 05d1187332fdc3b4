"""Tests for the gitsemver command line."""

import logging

import pytest
from click.testing import CliRunner

from gitsemver import __version__
from gitsemver.cli.main import cli
from gitsemver.cli.utils import logging as cli_logging
from gitsemver.config import get_version_cache_dir


@pytest.fixture(autouse=True)
def reset_cli_logging():
    """The CLI installs a handler on the runner's stderr; drop it afterwards."""
    yield
    if cli_logging._handler is not None:
        logging.getLogger("gitsemver").removeHandler(cli_logging._handler)
        cli_logging._handler = None


def last_line(output: str) -> str:
    # Log lines are written before the result
    return output.strip().splitlines()[-1]


@pytest.mark.integration
class TestShow:
    def test_json_output(self, single_commit_repo):
        runner = CliRunner()
        result = runner.invoke(cli, ["show", str(single_commit_repo.path)])

        assert result.exit_code == 0
        assert '"AssemblySemVer": "0.1.0.0"' in result.output
        assert '"BranchName": "main"' in result.output
        assert '"FileName":' in result.output

    def test_show_variable(self, single_commit_repo):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["show", str(single_commit_repo.path), "--show-variable", "SemVer"]
        )

        assert result.exit_code == 0
        assert last_line(result.output) == "0.1.0"

    def test_show_variable_is_case_insensitive(self, single_commit_repo):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["show", str(single_commit_repo.path), "-v", "majorminorpatch"]
        )

        assert result.exit_code == 0
        assert last_line(result.output) == "0.1.0"

    def test_keyvalue_output(self, single_commit_repo):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["show", str(single_commit_repo.path), "--output", "keyvalue", "--no-cache"]
        )

        assert result.exit_code == 0
        assert "Major=0\n" in result.output
        assert "FullSemVer=0.1.0\n" in result.output
        assert "FileName=" not in result.output

    def test_branch_option(self, repo_builder):
        repo_builder.commit("initial")
        repo_builder.tag("v1.0.0")
        repo_builder.branch("release/2.0.0")
        repo_builder.commit("prepare")
        repo_builder.checkout("main")

        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "show",
                str(repo_builder.path),
                "--branch",
                "release/2.0.0",
                "-v",
                "BranchName",
            ],
        )

        assert result.exit_code == 0
        assert last_line(result.output) == "release/2.0.0"

    def test_config_option(self, single_commit_repo, tmp_path):
        config_file = tmp_path / "other.yml"
        config_file.write_text("next-version: 3.1\n")

        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "show",
                str(single_commit_repo.path),
                "--config",
                str(config_file),
                "-v",
                "MajorMinorPatch",
            ],
        )

        assert result.exit_code == 0
        assert last_line(result.output) == "3.1.0"

    def test_not_a_repository(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["show", str(tmp_path)])

        assert result.exit_code == 1
        assert "Can't find the .git directory" in result.output

    def test_invalid_configuration(self, single_commit_repo):
        (single_commit_repo.path / "gitsemver.yml").write_text("mode: Sometimes\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["show", str(single_commit_repo.path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_debug_logs_branch_rule(self, single_commit_repo):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["--debug", "show", str(single_commit_repo.path), "--no-cache"]
        )

        assert result.exit_code == 0
        assert "matches branch rule 'main'" in result.output



@pytest.mark.short
class TestUnexpectedErrors:
    @pytest.fixture
    def failing_compute(self, monkeypatch):
        def fail(options):
            raise RuntimeError("boom")

        monkeypatch.setattr("gitsemver.cli.show.compute_version", fail)

    def test_traceback_hidden_by_default(self, failing_compute, tmp_path):
        result = CliRunner().invoke(cli, ["show", str(tmp_path)])

        assert result.exit_code == 1
        assert "Failed to compute version: boom" in result.output
        assert "Traceback" not in result.output

    def test_traceback_shown_with_debug(self, failing_compute, tmp_path):
        result = CliRunner().invoke(cli, ["--debug", "show", str(tmp_path)])

        assert result.exit_code == 1
        assert "Failed to compute version: boom" in result.output
        assert "Traceback" in result.output
        assert "RuntimeError: boom" in result.output

@pytest.mark.integration
class TestCacheCommands:
    def test_path(self, single_commit_repo):
        runner = CliRunner()
        result = runner.invoke(cli, ["cache", "path", str(single_commit_repo.path)])

        assert result.exit_code == 0
        expected = get_version_cache_dir(single_commit_repo.path / ".git")
        assert f"version cache: {expected}" in result.output
        assert "dynamic repositories:" in result.output

    def test_clear(self, single_commit_repo):
        runner = CliRunner()
        path = str(single_commit_repo.path)
        assert runner.invoke(cli, ["show", path]).exit_code == 0
        cache_dir = get_version_cache_dir(single_commit_repo.path / ".git")
        assert list(cache_dir.glob("*.yml"))

        result = runner.invoke(cli, ["cache", "clear", path])
        assert result.exit_code == 0
        assert list(cache_dir.glob("*.yml")) == []
        assert "Removed 1 cached version entries" in result.output

    def test_clear_without_cache(self, single_commit_repo):
        runner = CliRunner()
        result = runner.invoke(cli, ["cache", "clear", str(single_commit_repo.path)])

        assert result.exit_code == 0
        assert "No version cache at" in result.output


@pytest.mark.short
def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
