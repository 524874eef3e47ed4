import os
from typing import Optional

from sitecrawl.domain.config import CrawlConfig


def _section(data: dict, key: str) -> dict:
    """Return the nested mapping under `key`, or {} when the section is absent."""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be a mapping")
    return value


class CrawlConfigParser:
    """Turn a YAML dict into a CrawlConfig.

    Responsibility: schema/validation for YAML config files.
    It does NOT perform filesystem IO.

    Expected layout (every key optional except a target URL somewhere)::

        target_url: https://example.com
        crawl: {max_depth, max_pages, concurrency, request_delay_seconds, page_timeout_ms, robots}
        retry: {max_retries, delay_seconds}
        output: {format, dir, log_dir}
        fetch: {mode, headed, accept_language, <mode>: {wait_until, block_resources}}
        user_agents: [...]
        schedule: "0 */6 * * *"
    """

    def parse_options(self, data: dict) -> dict:
        """Flatten the nested YAML layout into CrawlConfig keyword arguments."""
        data = data or {}
        options = {}

        def put(key, value):
            if value is not None:
                options[key] = value

        put("target_url", data.get("target_url"))

        crawl = _section(data, "crawl")
        for key in ("max_depth", "max_pages", "concurrency", "request_delay_seconds", "page_timeout_ms", "robots"):
            put(key, crawl.get(key))

        retry = _section(data, "retry")
        put("max_retries", retry.get("max_retries"))
        put("retry_delay_seconds", retry.get("delay_seconds"))

        output = _section(data, "output")
        put("output_format", output.get("format"))
        put("output_dir", output.get("dir"))
        put("log_dir", output.get("log_dir"))

        # Mode-specific options go under a key matching the mode name
        fetch = _section(data, "fetch")
        fetch_mode = fetch.get("mode")
        put("fetch_mode", fetch_mode)
        put("headed", fetch.get("headed"))
        put("accept_language", fetch.get("accept_language"))
        if fetch_mode and isinstance(fetch.get(fetch_mode), dict):
            mode_options = fetch[fetch_mode]
            put("wait_until", mode_options.get("wait_until"))
            put("block_resources", mode_options.get("block_resources"))
            put("page_timeout_ms", mode_options.get("timeout_ms"))

        user_agents = data.get("user_agents")
        if user_agents is not None:
            if isinstance(user_agents, str) or not isinstance(user_agents, (list, tuple)):
                raise ValueError("user_agents must be a list of strings")
            options["user_agents"] = tuple(str(ua) for ua in user_agents)

        put("schedule", data.get("schedule"))
        return options

    def parse(
        self,
        *,
        data: dict,
        config_path: Optional[str] = None,
        defaults: Optional[dict] = None,
        overrides: Optional[dict] = None,
    ) -> CrawlConfig:
        """Merge `defaults` < YAML `data` < non-None `overrides` and validate."""
        merged = dict(defaults or {})
        merged.update(self.parse_options(data))
        merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
        if config_path is not None:
            merged["config_path"] = os.path.basename(config_path)
        if not merged.get("target_url"):
            raise ValueError("target_url is required")
        return CrawlConfig(**merged)
