"""Adapter configuration and bundled YAML settings."""

import os
from dataclasses import dataclass, field
from typing import Any, Callable

import yaml

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_USER_AGENT = "FollowBot/1.0 (+https://follow.app)"
DEFAULT_CONCURRENCY = 5

# Entry key holding custom rule output until it is moved into ParsedItem.extra
CUSTOM_FIELDS_KEY = "_custom_fields"

CONFIG_ENV_VAR = "RSS_INGEST_CONFIG"
DEFAULT_SETTINGS_PATH = os.path.join(os.path.dirname(__file__), "data", "settings.yaml")


@dataclass
class CustomRule:
    """
    Extra per-item field to pull out of the parsed entry.

    Attributes:
        field: Entry key as exposed by feedparser (e.g. ``dc_rights``)
        target: Key under ``ParsedItem.extra`` (defaults to ``field``)
        attribute: Sub-key to read when the entry value is a mapping
        transform: Optional callable applied to the extracted value
    """

    field: str
    target: str | None = None
    attribute: str | None = None
    transform: Callable[[Any], Any] | None = None

    def apply(self, entry: dict[str, Any]) -> Any:
        value = entry.get(self.field)
        if self.attribute and isinstance(value, dict):
            value = value.get(self.attribute)
        if value is not None and self.transform is not None:
            value = self.transform(value)
        return value


@dataclass
class AdapterConfig:
    """
    Options an adapter fetches with.

    Unset fields (``None``/empty) fall back to defaults; see ``merged_over``.
    """

    timeout: int | None = None
    user_agent: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    custom_rules: list[CustomRule] = field(default_factory=list)

    def merged_over(self, defaults: "AdapterConfig") -> "AdapterConfig":
        """
        Layer this (caller) config over ``defaults``.

        The caller wins for every field it sets. Headers merge key by key.
        """
        return AdapterConfig(
            timeout=self.timeout if self.timeout is not None else defaults.timeout,
            user_agent=self.user_agent if self.user_agent is not None else defaults.user_agent,
            headers={**defaults.headers, **self.headers},
            custom_rules=list(self.custom_rules or defaults.custom_rules),
        )

    @property
    def request_headers(self) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent or DEFAULT_USER_AGENT}
        headers.update(self.headers)
        return headers

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AdapterConfig":
        data = data or {}
        timeout = data.get("timeout")
        return cls(
            timeout=int(timeout) if timeout is not None else None,
            user_agent=data.get("user_agent"),
            headers=dict(data.get("headers") or {}),
            custom_rules=[
                CustomRule(
                    field=rule["field"],
                    target=rule.get("target"),
                    attribute=rule.get("attribute"),
                )
                for rule in data.get("custom_rules") or []
            ],
        )


BASE_DEFAULTS = AdapterConfig(timeout=DEFAULT_TIMEOUT_MS, user_agent=DEFAULT_USER_AGENT)


@dataclass
class Settings:
    adapter: AdapterConfig = field(default_factory=AdapterConfig)
    concurrency: int = DEFAULT_CONCURRENCY
    feeds: list[str] = field(default_factory=list)


def load_settings(path: str | None = None) -> Settings:
    """
    Load settings from YAML.

    Args:
        path: Settings file. Defaults to $RSS_INGEST_CONFIG, then the bundled
            data/settings.yaml

    Returns:
        Parsed settings
    """
    config_path = path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_SETTINGS_PATH
    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return Settings(
        adapter=AdapterConfig.from_dict(config.get("adapter")),
        concurrency=int(config.get("concurrency", DEFAULT_CONCURRENCY)),
        feeds=list(config.get("feeds", [])),
    )
