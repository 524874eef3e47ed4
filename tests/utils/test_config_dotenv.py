import importlib
import sys
import builtins
import types
import logging
import os
from pathlib import Path

import pytest


def _reload_config():
    sys.modules.pop("sitecrawl.config", None)
    return importlib.import_module("sitecrawl.config")


def test_missing_dotenv_logs_warning(monkeypatch, caplog):
    orig_import = builtins.__import__

    def fake_import(name, globals=None, locals=None, fromlist=(), level=0):
        if name == "dotenv" or name.startswith("dotenv."):
            raise ImportError
        return orig_import(name, globals, locals, fromlist, level)

    monkeypatch.setattr(builtins, "__import__", fake_import)
    caplog.set_level(logging.WARNING)
    cfg = _reload_config()
    assert "python-dotenv not available" in caplog.text

    # environment fallback works
    monkeypatch.setenv("USER_AGENT", "X-Agent")
    cfg = _reload_config()
    assert cfg.get_str_env("USER_AGENT", "SiteCrawl/0.1") == "X-Agent"


def test_dotenv_present_but_fails_to_load(monkeypatch, tmp_path):
    tmp_path.joinpath(".env").write_text("USER_AGENT=FromFile")
    monkeypatch.chdir(tmp_path)

    fake = types.SimpleNamespace(load_dotenv=lambda: False)
    monkeypatch.setitem(sys.modules, "dotenv", fake)
    with pytest.raises(RuntimeError):
        _reload_config()


def test_dotenv_loads_sets_variables(monkeypatch, tmp_path):
    tmp_path.joinpath(".env").write_text("SITECRAWL_MAX_DEPTH=5")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SITECRAWL_MAX_DEPTH", raising=False)

    def fake_load():
        # emulate dotenv behavior: read .env and set os.environ
        for line in Path(".env").read_text().splitlines():
            if "=" in line:
                k, v = line.split("=", 1)
                monkeypatch.setenv(k, v)
        return True

    fake = types.SimpleNamespace(load_dotenv=fake_load)
    monkeypatch.setitem(sys.modules, "dotenv", fake)
    cfg = _reload_config()
    assert cfg.get_int_env("SITECRAWL_MAX_DEPTH", 3) == 5


def test_typed_helpers_fall_back_on_bad_values(monkeypatch):
    cfg = _reload_config()
    monkeypatch.setenv("SITECRAWL_MAX_PAGES", "lots")
    monkeypatch.setenv("CRAWL_DELAY", "soon")
    monkeypatch.setenv("SITECRAWL_HEADED", "maybe")
    assert cfg.get_int_env("SITECRAWL_MAX_PAGES", 50) == 50
    assert cfg.get_float_env("CRAWL_DELAY", 0.5) == 0.5
    assert cfg.get_bool_env("SITECRAWL_HEADED", False) is False


def test_bool_and_list_helpers(monkeypatch):
    cfg = _reload_config()
    monkeypatch.setenv("SITECRAWL_ROBOTS", "off")
    monkeypatch.setenv("SITECRAWL_USER_AGENTS", "Agent A, v1 | Agent B ||")
    assert cfg.get_bool_env("SITECRAWL_ROBOTS", True) is False
    assert cfg.get_list_env("SITECRAWL_USER_AGENTS", ("x",)) == ("Agent A, v1", "Agent B")
    monkeypatch.delenv("SITECRAWL_USER_AGENTS")
    assert cfg.get_list_env("SITECRAWL_USER_AGENTS", ("x",)) == ("x",)
    assert cfg.get_optional_str_env("SITECRAWL_UNSET_FOR_TEST") is None
