import os
from typing import Optional

import yaml

from sitecrawl.exceptions import ConfigNotFoundError


class ConfigFileStore:
    """Filesystem/YAML IO for crawl config files.

    Responsibility: locate, read, and parse YAML files on disk.
    It does NOT validate crawl options (see `CrawlConfigParser`).
    """

    def __init__(self, *, configs_dir: Optional[str] = None):
        self.configs_dir = configs_dir or os.getcwd()

    def list_config_files(self) -> list[str]:
        return sorted(
            fname
            for fname in os.listdir(self.configs_dir)
            if fname.endswith(".yml") or fname.endswith(".yaml")
        )

    def _resolve_path(self, config_path: str) -> str:
        return config_path if os.path.isabs(config_path) else os.path.join(self.configs_dir, config_path)

    def load_yaml_dict(self, config_path: str) -> dict:
        """Return the parsed YAML mapping for `config_path`.

        Raises ConfigNotFoundError if the file is missing, unreadable, or not a mapping.
        """
        full_path = self._resolve_path(config_path)
        if not os.path.isfile(full_path):
            raise ConfigNotFoundError(config_path)
        try:
            with open(full_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigNotFoundError(config_path, f"could not be read: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigNotFoundError(config_path, "is not a YAML mapping")
        return data
