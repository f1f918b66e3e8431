"""Configuration loading and validation for the search controller."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path

DEFAULT_CONFIG_PATH = Path("config/search_config.json")

# Environment overrides, applied after the JSON file
ENV_OVERRIDES: dict[str, tuple[str, type]] = {
    "TYPEAHEAD_BASE_URL": ("base_url", str),
    "TYPEAHEAD_DEBOUNCE_MS": ("debounce_ms", int),
    "TYPEAHEAD_PAGE_SIZE": ("page_size", int),
}


@dataclass
class SearchConfig:
    """Search controller configuration with defaults matching the product search box."""

    base_url: str = "http://fakestoreapi.in/api"
    debounce_ms: int = 300
    page_size: int = 15
    stale_time_seconds: float = 300.0  # 5 minutes
    request_timeout_seconds: float = 10.0
    scroll_threshold: float = 1.0
    log_dir: str = "logs"

    def __post_init__(self) -> None:
        """Reject values the controller cannot work with."""
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")
        if self.debounce_ms < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {self.debounce_ms}")
        if self.stale_time_seconds < 0:
            raise ValueError(
                f"stale_time_seconds must be >= 0, got {self.stale_time_seconds}"
            )
        if self.request_timeout_seconds <= 0:
            raise ValueError(
                f"request_timeout_seconds must be > 0, got {self.request_timeout_seconds}"
            )
        if self.scroll_threshold < 0:
            raise ValueError(f"scroll_threshold must be >= 0, got {self.scroll_threshold}")
        self.base_url = self.base_url.rstrip("/")

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


def load_config(config_path: Path | None = None) -> SearchConfig:
    """Load search configuration from JSON, merging with defaults.

    Reads ``config/search_config.json`` when *config_path* is ``None`` and
    the file exists. Unknown keys are ignored. ``TYPEAHEAD_*`` environment
    variables override values from the file.

    Args:
        config_path: Optional path to a JSON config file.

    Returns:
        SearchConfig with file and environment values merged over defaults.

    Raises:
        FileNotFoundError: If *config_path* is given but does not exist.
        ValueError: If a merged value fails validation.
    """
    data: dict[str, object] = {}
    path = config_path if config_path is not None else DEFAULT_CONFIG_PATH
    if config_path is not None or path.exists():
        with open(path) as f:
            data = json.load(f)

    known = {f.name for f in fields(SearchConfig)}
    kwargs: dict[str, object] = {k: v for k, v in data.items() if k in known}

    for env_name, (field_name, cast) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw:
            try:
                kwargs[field_name] = cast(raw)
            except ValueError as exc:
                raise ValueError(f"{env_name}={raw!r} is not a valid {cast.__name__}") from exc

    return SearchConfig(**kwargs)  # type: ignore[arg-type]
