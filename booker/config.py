from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from booker.errors import ConfigError

logger = logging.getLogger(__name__)

# Probed in order, relative to the working directory; first readable JSON wins
CONFIG_PATHS = (
    Path("deskbird.json"),
    Path("config") / "deskbird.json",
    Path("..") / "deskbird.json",
)

# Defaults
DEFAULT_BASE_URL = "https://connect.deskbird.com"
DEFAULT_TIMEZONE = "Europe/Madrid"
DEFAULT_START = "09:00"
DEFAULT_END = "18:00"
DEFAULT_MY_DAYS = 14


@dataclass
class Config:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    default_office_id: Optional[str] = None
    timezone: str = DEFAULT_TIMEZONE


def load_json(path: Path, default: Any) -> Any:
    """Read JSON from `path`; return `default` if missing or malformed."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return default
    except (OSError, ValueError) as e:
        logger.debug("Skipping unreadable config %s: %s", path, e)
        return default


def load_file_config(search_paths: Sequence[Path] = CONFIG_PATHS) -> Dict[str, Any]:
    for p in search_paths:
        data = load_json(p, None)
        if isinstance(data, dict):
            logger.debug("Loaded config file %s", p.resolve())
            return data
    return {}


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    search_paths: Sequence[Path] = CONFIG_PATHS,
) -> Config:
    """
    Build the runtime Config. Environment variables win over the config file,
    which wins over the built-in defaults.

    raises: ConfigError if no API key is available.
    """
    env = os.environ if environ is None else environ
    file_cfg = load_file_config(search_paths)

    api_key = env.get("DESKBIRD_API_KEY") or file_cfg.get("apiKey")
    if not api_key:
        raise ConfigError(
            "DESKBIRD_API_KEY environment variable is required. "
            "Get your API key from the Deskbird app: Settings > Integrations > API"
        )

    return Config(
        api_key=api_key,
        base_url=env.get("DESKBIRD_BASE_URL") or file_cfg.get("baseUrl") or DEFAULT_BASE_URL,
        default_office_id=env.get("DESKBIRD_OFFICE_ID") or file_cfg.get("defaultOfficeId") or None,
        timezone=env.get("TZ") or file_cfg.get("timezone") or DEFAULT_TIMEZONE,
    )
