from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
import yaml


PAGE_TITLE = "List_of_TCP_and_UDP_port_numbers"
ORIGIN_BASE_URL = "https://en.wikipedia.org"
PAGE_URL = f"{ORIGIN_BASE_URL}/wiki/{PAGE_TITLE}"


class Settings(BaseModel):
    """Where pages come from, where they are cached and how links resolve."""

    # One `<revision>.html` file per cached page revision
    cache_dir: Path = Field(default_factory=lambda: Path.home() / ".cache" / "what-the-port")
    page_url: str = PAGE_URL
    history_api_url: str = (
        f"https://api.wikimedia.org/core/v1/wikipedia/en/page/{PAGE_TITLE}/history"
    )
    # Base for site-relative links such as `/wiki/HTTP`
    origin_base_url: str = ORIGIN_BASE_URL

    timeout: float = 10.0
    user_agent: str = "what-the-port (https://github.com/cyqsimon/what-the-port)"


def load_settings(path: Optional[Path]) -> Settings:
    """Read settings from a YAML file; defaults when there is no such file.

    ``~`` is expanded both in the file path and in ``cache_dir``.
    """
    if path is None:
        return Settings()
    config_file = Path(path).expanduser()
    if not config_file.is_file():
        return Settings()

    overrides = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
    if not isinstance(overrides, dict):
        raise ValueError(f"{config_file}: expected a mapping of settings")
    if "cache_dir" in overrides:
        overrides["cache_dir"] = Path(str(overrides["cache_dir"])).expanduser()
    return Settings.model_validate(overrides)
