import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import dotenv_values

from .logging import get_logger
from .paths import expand_abs, find_project_root, var_dir

log = get_logger("config")

DEFAULT_DB_FOLDER = "inventory"
DEFAULT_DB_FILENAME = "inventory.sqlite3"
DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8002
DEFAULT_ALLOW_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]


def _find_upwards(start_dir: str, filename: str) -> Optional[str]:
    """Return first matching file found when walking up from start_dir.

    Lets the CLI run from subdirectories (e.g. `src/`) and still pick up the
    repository-level `.env`.
    """
    d = os.path.abspath(start_dir or ".")
    while True:
        candidate = os.path.join(d, filename)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(d)
        if parent == d:
            return None
        d = parent


def _read_dotenv(dotenv_dir: str) -> Dict[str, str]:
    """Read the nearest .env as a mapping; does not mutate the environment."""
    path = _find_upwards(dotenv_dir, ".env")
    if not path:
        log.debug(f"No .env found starting from: {os.path.abspath(dotenv_dir)}")
        return {}
    values = {k: v for k, v in dotenv_values(path).items() if v is not None}
    log.debug(f"Loaded {len(values)} key(s) from .env at {path}")
    return values


def _lookup(key: str, env: Dict[str, str]) -> Optional[str]:
    v = os.environ.get(key)
    if v is None:
        v = env.get(key)
    if v is None:
        return None
    v = v.strip()
    return v or None


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_ALLOW_ORIGINS)
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or list(DEFAULT_ALLOW_ORIGINS)


@dataclass
class Settings:
    db_path: str
    api_host: str = DEFAULT_API_HOST
    api_port: int = DEFAULT_API_PORT
    allow_origins: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOW_ORIGINS))


def default_db_path(root_dir: Optional[str] = None) -> str:
    """Return `<project-root>/var/inventory/inventory.sqlite3`."""
    root = find_project_root(root_dir)
    return os.path.join(var_dir(root), DEFAULT_DB_FOLDER, DEFAULT_DB_FILENAME)


def load_db_path(dotenv_dir: str, root_dir: Optional[str] = None) -> str:
    v = _lookup("RESALE_DB_PATH", _read_dotenv(dotenv_dir))
    if v:
        log.info("Using RESALE_DB_PATH override")
        return expand_abs(v)
    return default_db_path(root_dir or dotenv_dir)


def load_settings(dotenv_dir: str) -> Settings:
    """Resolve all settings; process environment wins over `.env`."""
    env = _read_dotenv(dotenv_dir)
    port_raw = _lookup("RESALE_API_PORT", env)
    try:
        port = int(port_raw) if port_raw else DEFAULT_API_PORT
    except ValueError:
        log.warning(f"Ignoring invalid RESALE_API_PORT={port_raw!r}; using {DEFAULT_API_PORT}")
        port = DEFAULT_API_PORT
    return Settings(
        db_path=load_db_path(dotenv_dir),
        api_host=_lookup("RESALE_API_HOST", env) or DEFAULT_API_HOST,
        api_port=port,
        allow_origins=_split_origins(_lookup("RESALE_ALLOW_ORIGINS", env)),
    )
