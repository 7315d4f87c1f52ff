import logging

import pytest

from hiresight.config import get_config, MAX_TURNS
from hiresight.utils import setup_logging


def test_placeholder_project_is_rejected(monkeypatch):
    monkeypatch.delenv("GOOGLE_CLOUD_PROJECT", raising=False)
    with pytest.raises(ValueError):
        get_config()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "demo-project")
    monkeypatch.setenv("HIRESIGHT_MAX_TURNS", "4")
    monkeypatch.setenv("HIRESIGHT_API_URL", "https://api.example.com")

    config = get_config()

    assert config.google_cloud_project == "demo-project"
    assert config.max_turns == 4
    assert config.api_base_url == "https://api.example.com"


def test_default_max_turns(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "demo-project")
    monkeypatch.delenv("HIRESIGHT_MAX_TURNS", raising=False)
    assert get_config().max_turns == MAX_TURNS


@pytest.mark.parametrize("value", ["zero", "0"])
def test_invalid_max_turns(monkeypatch, value):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "demo-project")
    monkeypatch.setenv("HIRESIGHT_MAX_TURNS", value)
    with pytest.raises(ValueError):
        get_config()


def test_setup_logging_writes_to_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    path = tmp_path / "logs" / "interview.log"
    try:
        assert setup_logging(str(path), "INFO") == str(path)
        logging.getLogger("controller").info("turn recorded")
        logging.getLogger("controller").debug("hidden detail")
        for handler in root.handlers:
            handler.flush()
        content = path.read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    assert "INFO controller - turn recorded" in content
    assert "hidden detail" not in content
