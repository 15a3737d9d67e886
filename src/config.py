"""Runtime settings.

Priority for every value: real environment variable > project .env file >
default. Malformed values fall back to the default rather than failing.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

ENV_FILE = Path(__file__).resolve().parent.parent / '.env'
DEFAULT_DATA_DIR = Path.home() / '.local' / 'share' / 'taskboard'

# Default palette (column accents + primary for headers/ids)
DEFAULT_PALETTE: Dict[str, str] = {
    'primary': '#476EAE',
    'todo': '#48B3AF',
    'inprogress': '#F6FF99',
    'done': '#A7E399',
}
_PALETTE_VARS = {
    'TASKBOARD_PRIMARY': 'primary',
    'TASKBOARD_TODO': 'todo',
    'TASKBOARD_INPROGRESS': 'inprogress',
    'TASKBOARD_DONE': 'done',
}
_KNOWN_VARS = {
    'TASKBOARD_DATA_DIR', 'TASKBOARD_LOG_LEVEL', 'TASKBOARD_LOG_FILE',
    'TASKBOARD_ALT_SCREEN', 'NO_COLOR', 'FORCE_COLOR', *_PALETTE_VARS,
}


def truthy(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


def normalize_hex(value: Optional[str]) -> Optional[str]:
    """Return ``#rrggbb`` for a 6-digit hex colour (with or without '#'), else None."""
    if not value:
        return None
    h = value.strip().lstrip('#')
    if len(h) == 6 and all(c in '0123456789abcdefABCDEF' for c in h):
        return '#' + h
    return None


def read_env_file(path: Path) -> Dict[str, str]:
    """Parse KEY=VALUE lines we know about; comments and junk are ignored."""
    values: Dict[str, str] = {}
    if not path.exists():
        return values
    try:
        text = path.read_text()
    except OSError:
        return values
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip()
        if k in _KNOWN_VARS:
            values[k] = v.strip().strip('"').strip("'")
    return values


def _log_level(name: Optional[str]) -> str:
    if name and isinstance(logging.getLevelName(name.strip().upper()), int):
        return name.strip().upper()
    return 'WARNING'


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    log_level: str = 'WARNING'
    log_file: Optional[Path] = None
    alt_screen: bool = True
    no_color: bool = False
    force_color: bool = False
    palette: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PALETTE))

    @classmethod
    def load(cls, env: Optional[Mapping[str, str]] = None,
             env_file: Optional[Path] = None) -> "Settings":
        env = os.environ if env is None else env
        file_values = read_env_file(ENV_FILE if env_file is None else env_file)

        def lookup(name: str) -> Optional[str]:
            value = env.get(name)
            return value if value is not None else file_values.get(name)

        data_dir = lookup('TASKBOARD_DATA_DIR')
        log_file = lookup('TASKBOARD_LOG_FILE')
        palette = dict(DEFAULT_PALETTE)
        for var, slot in _PALETTE_VARS.items():
            # a malformed env value still lets a valid .env value through
            chosen = normalize_hex(env.get(var)) or normalize_hex(file_values.get(var))
            if chosen:
                palette[slot] = chosen
        return cls(
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
            log_level=_log_level(lookup('TASKBOARD_LOG_LEVEL')),
            log_file=Path(log_file).expanduser() if log_file else None,
            alt_screen=truthy(lookup('TASKBOARD_ALT_SCREEN'), True),
            no_color=lookup('NO_COLOR') is not None,
            force_color=truthy(lookup('FORCE_COLOR'), False),
            palette=palette,
        )
