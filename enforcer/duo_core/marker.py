"""
Done marker — a file whose existence means "quota met today".

Its content (today's ISO date) is for humans only. Whatever enforces the
block just checks whether the file exists.
"""

from pathlib import Path

from .config import log
from .errors import PersistenceError


def is_done(path) -> bool:
    return Path(path).exists()


def write_done(path, today):
    path = Path(path)
    already = is_done(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(today.isoformat(), encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Failed to write done file {path}: {e}") from e
    if not already:
        log.info("Block disabled. Created %s", path)


def remove_done(path):
    path = Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as e:
        raise PersistenceError(f"Failed to remove done file {path}: {e}") from e
    log.info("Block enabled. Removed %s", path)
