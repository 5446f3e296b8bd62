"""Unit tests for settings loading."""

import logging
from dataclasses import fields
from pathlib import Path

import pytest

from config import Settings, configure_logging, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for f in fields(Settings):
        monkeypatch.delenv(f"TASKFLOW_{f.name.upper()}", raising=False)


class TestLoadSettings:

    def test_defaults_without_file(self, tmp_path):
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings == Settings()

    def test_yaml_overrides(self, tmp_path):
        path = tmp_path / "taskflow.yaml"
        path.write_text("backend: json\ndata_dir: /tmp/tf\njob_step: 10\nbackend_latency: 0.2\n")

        settings = load_settings(path)

        assert settings.backend == "json"
        assert settings.data_dir == Path("/tmp/tf")
        assert settings.job_step == 10
        assert settings.backend_latency == 0.2

    def test_env_beats_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "taskflow.yaml"
        path.write_text("default_login: yaml-user\n")
        monkeypatch.setenv("TASKFLOW_DEFAULT_LOGIN", "env-user")

        assert load_settings(path).default_login == "env-user"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "taskflow.yaml"
        path.write_text("")
        assert load_settings(path) == Settings()

    def test_bad_number_raises(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TASKFLOW_JOB_STEP", "lots")
        with pytest.raises(ValueError):
            load_settings(tmp_path / "missing.yaml")


def test_configure_logging_replaces_handlers():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        handler = logging.NullHandler()
        configure_logging("debug", handler)
        assert root.handlers == [handler]
        assert root.level == logging.DEBUG
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
