"""Tests for the storyjournal command line."""

import json

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point every path the CLI touches at tmp_path and use offline backends."""
    paths = {
        "queue": tmp_path / "data" / "offline-requests.json",
        "db": tmp_path / "data" / "journal.db",
        "logs": tmp_path / "logs",
    }
    monkeypatch.setenv("QUEUE_FILE_PATH", str(paths["queue"]))
    monkeypatch.setenv("SQLITE_DB_PATH", str(paths["db"]))
    monkeypatch.setenv("LOG_DIR", str(paths["logs"]))
    monkeypatch.setenv("CHAPTER_BACKEND", "template")
    monkeypatch.setenv("METADATA_BACKEND", "on_device")
    monkeypatch.chdir(tmp_path)
    return paths


@pytest.fixture
def runner():
    return CliRunner()


def _invoke(runner, *args):
    from cli.main import cli
    return runner.invoke(cli, list(args), catch_exceptions=False)


def _queue_records(cli_env):
    return json.loads(cli_env["queue"].read_text(encoding="utf-8"))


def _add_entry(runner, entry_id="entry-1"):
    return _invoke(
        runner, "add-entry",
        "-a", "Essay 1", "-s", "Math",
        "-t", "Today Maya and I played soccer at Riverside Park. I was happy.",
        "-p", "How did it go?=Good",
        "--summary", "Nice work",
        "-e", entry_id,
    )


class TestAddEntry:
    def test_saves_entry(self, runner, cli_env):
        from models.database import Database
        result = _add_entry(runner)
        assert result.exit_code == 0
        assert "entry-1" in result.output

        entry = Database(cli_env["db"]).get_journal_entry("entry-1")
        assert entry.subject == "Math"
        assert entry.reflection_prompts[0].answer == "Good"

    def test_bad_prompt_option(self, runner, cli_env):
        from cli.main import cli
        result = runner.invoke(cli, ["add-entry", "-a", "A", "-s", "B", "-p", "no-separator"])
        assert result.exit_code == 2


class TestStoryFlow:
    def test_enqueue_and_process_online(self, runner, cli_env):
        from models.database import Database
        _add_entry(runner)
        result = _invoke(runner, "enqueue-story", "-e", "entry-1", "-g", "Mystery")
        assert result.exit_code == 0

        records = _queue_records(cli_env)
        assert len(records) == 1
        assert records[0]["status"] == "completed"
        assert Database(cli_env["db"]).count_story_arcs() == 1

    def test_offline_then_process(self, runner, cli_env):
        _add_entry(runner)
        result = _invoke(runner, "enqueue-story", "-e", "entry-1", "--offline")
        assert result.exit_code == 0
        assert _queue_records(cli_env)[0]["status"] == "pending"
        assert _queue_records(cli_env)[0]["data"]["genre"] == "Fantasy"

        result = _invoke(runner, "process")
        assert result.exit_code == 0
        assert _queue_records(cli_env)[0]["status"] == "completed"

    def test_missing_entry_fails_request(self, runner, cli_env):
        _invoke(runner, "enqueue-story", "-e", "ghost")
        record = _queue_records(cli_env)[0]
        assert record["status"] == "failed"
        assert record["errorMessage"] == "journal entry not found"

    def test_retry_and_remove(self, runner, cli_env):
        _invoke(runner, "enqueue-story", "-e", "ghost")
        request_id = _queue_records(cli_env)[0]["id"]

        result = _invoke(runner, "retry", request_id)
        assert result.exit_code == 0
        assert _queue_records(cli_env)[0]["attemptCount"] == 2

        result = _invoke(runner, "remove", request_id)
        assert result.exit_code == 0
        assert _queue_records(cli_env) == []

    def test_unknown_ids(self, runner, cli_env):
        assert _invoke(runner, "retry", "nope").exit_code == 1
        assert _invoke(runner, "remove", "nope").exit_code == 1

    def test_clear_completed(self, runner, cli_env):
        _add_entry(runner)
        _invoke(runner, "enqueue-story", "-e", "entry-1")
        result = _invoke(runner, "clear-completed")
        assert result.exit_code == 0
        assert "Cleared 1" in result.output
        assert _queue_records(cli_env) == []


class TestListings:
    def test_empty_queue(self, runner, cli_env):
        result = _invoke(runner, "queue")
        assert result.exit_code == 0
        assert "empty" in result.output

    def test_queue_lists_requests(self, runner, cli_env):
        _invoke(runner, "enqueue-story", "-e", "entry-1", "--offline")
        result = _invoke(runner, "queue")
        assert result.exit_code == 0
        assert "Pending: 1" in result.output

    def test_arcs(self, runner, cli_env):
        assert "No story arcs yet" in _invoke(runner, "arcs").output
        _add_entry(runner)
        _invoke(runner, "enqueue-story", "-e", "entry-1")
        result = _invoke(runner, "arcs", "-n", "5")
        assert "Total arcs: 1" in result.output

    def test_extract(self, runner, cli_env):
        result = _invoke(runner, "extract", "Maya played soccer with Leo. We were so happy.")
        assert result.exit_code == 0
        assert "Leo" in result.output
        assert "soccer" in result.output

    def test_genres_and_default(self, runner, cli_env):
        result = _invoke(runner, "genres", "--set-default", "Sports")
        assert result.exit_code == 0
        assert "default" in result.output

        _invoke(runner, "enqueue-story", "-e", "entry-1", "--offline")
        assert _queue_records(cli_env)[0]["data"]["genre"] == "Sports"

    def test_unknown_default_genre(self, runner, cli_env):
        result = _invoke(runner, "genres", "--set-default", "Western")
        assert result.exit_code == 1
