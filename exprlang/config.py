from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Iterable, List


# Resolve installation dir (exprlang package directory)
_EXPRLANG_DIR = Path(__file__).resolve().parent

# Defaults
_DEFAULT_IRCASES_DIRS = [_EXPRLANG_DIR.parent / 'tests' / 'testdata' / 'ircases']


def paths_from_env(var: str, defaults: Iterable[Path]) -> List[Path]:
    raw = os.environ.get(var)
    if not raw:
        return [Path(p) for p in defaults]
    return [Path(p.strip()) for p in raw.split(os.pathsep) if p.strip()]


def get_ircases_root() -> Path:
    roots = paths_from_env('EXPRLANG_IRCASES_PATH', _DEFAULT_IRCASES_DIRS)
    # treat as single directory; if a file path is set, return its parent
    p = roots[0]
    return p if p.is_dir() or not p.exists() else p.parent


def get_log_level(default: int = logging.WARNING) -> int:
    raw = os.environ.get('EXPRLANG_LOG_LEVEL')
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


def configure_logging(level: int | None = None) -> logging.Logger:
    """Attach a stderr handler to the `exprlang` logger at the configured level."""
    logger = logging.getLogger('exprlang')
    logger.setLevel(get_log_level() if level is None else level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(levelname)s %(name)s: %(message)s'))
        logger.addHandler(handler)
    return logger
