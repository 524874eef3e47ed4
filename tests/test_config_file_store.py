import pytest

from sitecrawl.exceptions import ConfigNotFoundError
from sitecrawl.services.config_file_store import ConfigFileStore


def test_load_yaml_dict_relative_to_configs_dir(tmp_path):
    (tmp_path / "site.yml").write_text("target_url: https://example.com\ncrawl:\n  max_depth: 2\n")
    store = ConfigFileStore(configs_dir=str(tmp_path))
    assert store.load_yaml_dict("site.yml") == {
        "target_url": "https://example.com",
        "crawl": {"max_depth": 2},
    }


def test_load_yaml_dict_absolute_path(tmp_path):
    path = tmp_path / "abs.yaml"
    path.write_text("target_url: https://example.com\n")
    store = ConfigFileStore(configs_dir="/nonexistent")
    assert store.load_yaml_dict(str(path))["target_url"] == "https://example.com"


def test_empty_file_is_empty_mapping(tmp_path):
    (tmp_path / "empty.yml").write_text("")
    assert ConfigFileStore(configs_dir=str(tmp_path)).load_yaml_dict("empty.yml") == {}


def test_missing_file_raises(tmp_path):
    store = ConfigFileStore(configs_dir=str(tmp_path))
    with pytest.raises(ConfigNotFoundError) as exc:
        store.load_yaml_dict("nope.yml")
    assert exc.value.config_path == "nope.yml"


def test_invalid_yaml_raises(tmp_path):
    (tmp_path / "bad.yml").write_text("target_url: [unclosed\n")
    with pytest.raises(ConfigNotFoundError, match="could not be read"):
        ConfigFileStore(configs_dir=str(tmp_path)).load_yaml_dict("bad.yml")


def test_non_mapping_raises(tmp_path):
    (tmp_path / "list.yml").write_text("- a\n- b\n")
    with pytest.raises(ConfigNotFoundError, match="not a YAML mapping"):
        ConfigFileStore(configs_dir=str(tmp_path)).load_yaml_dict("list.yml")


def test_list_config_files(tmp_path):
    for name in ("b.yml", "a.yaml", "notes.txt"):
        (tmp_path / name).write_text("")
    assert ConfigFileStore(configs_dir=str(tmp_path)).list_config_files() == ["a.yaml", "b.yml"]
