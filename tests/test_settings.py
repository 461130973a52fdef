"""Tests for Settings validation."""

import pytest
from pydantic import ValidationError


def _make(tmp_path, **kwargs):
    from config.settings import Settings
    return Settings(
        _env_file=None,
        queue_file_path=tmp_path / "q" / "queue.json",
        sqlite_db_path=tmp_path / "db" / "journal.db",
        log_dir=tmp_path / "logs",
        **kwargs,
    )


class TestSettingsDefaults:
    def test_queue_defaults(self, tmp_path):
        s = _make(tmp_path)
        assert s.max_queue_size == 50
        assert s.max_retry_attempts == 3
        assert s.request_timeout_seconds == 120.0

    def test_narrative_defaults(self, tmp_path):
        s = _make(tmp_path)
        assert s.recent_arcs_limit == 3
        assert s.max_themes == 5
        assert s.default_genre == "Fantasy"
        assert s.metadata_backend == "on_device"
        assert s.chapter_backend == "remote"

    def test_api_defaults(self, tmp_path):
        s = _make(tmp_path)
        assert s.narrative_api_base_url == "http://localhost:3000"
        assert s.narrative_api_key is None
        assert s.metadata_api_retries == 3
        assert s.chapter_api_retries == 2
        assert s.api_cache_ttl_seconds == 86400

    def test_parent_dirs_created(self, tmp_path):
        s = _make(tmp_path)
        assert s.queue_file_path.parent.is_dir()
        assert s.sqlite_db_path.parent.is_dir()

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MAX_QUEUE_SIZE", "7")
        monkeypatch.setenv("CHAPTER_BACKEND", "template")
        s = _make(tmp_path)
        assert s.max_queue_size == 7
        assert s.chapter_backend == "template"


class TestSettingsValidation:
    @pytest.mark.parametrize("field", ["max_queue_size", "max_retry_attempts", "recent_arcs_limit", "max_themes"])
    def test_counts_below_one_raise(self, tmp_path, field):
        with pytest.raises(ValidationError, match=field):
            _make(tmp_path, **{field: 0})

    def test_negative_retries_raise(self, tmp_path):
        with pytest.raises(ValidationError, match="chapter_api_retries"):
            _make(tmp_path, chapter_api_retries=-1)

    def test_zero_retries_allowed(self, tmp_path):
        assert _make(tmp_path, metadata_api_retries=0).metadata_api_retries == 0

    def test_non_positive_timeout_raises(self, tmp_path):
        with pytest.raises(ValidationError, match="request_timeout_seconds"):
            _make(tmp_path, request_timeout_seconds=0)

    def test_base_url_requires_scheme(self, tmp_path):
        with pytest.raises(ValidationError, match="narrative_api_base_url"):
            _make(tmp_path, narrative_api_base_url="localhost:3000")

    def test_base_url_trailing_slash_stripped(self, tmp_path):
        s = _make(tmp_path, narrative_api_base_url="https://stories.example.com/")
        assert s.narrative_api_base_url == "https://stories.example.com"

    def test_unknown_default_genre_raises(self, tmp_path):
        with pytest.raises(ValidationError, match="default_genre"):
            _make(tmp_path, default_genre="Western")

    def test_unknown_backend_raises(self, tmp_path):
        with pytest.raises(ValidationError):
            _make(tmp_path, chapter_backend="magic")


class TestGetSettings:
    def test_returns_cached_instance(self, monkeypatch):
        import config.settings as settings_module
        monkeypatch.setattr(settings_module, "_settings_instance", None)
        sentinel = object()
        monkeypatch.setattr(settings_module, "Settings", lambda: sentinel)
        assert settings_module.get_settings() is sentinel
        assert settings_module.get_settings() is sentinel
