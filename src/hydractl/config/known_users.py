"""Loader for the known-users token file.

The file holds one bearer token per line. Lines starting with ``//``
are comments and blank lines are ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "//"


class KnownUsersError(Exception):
    """Raised when the known-users file cannot be read."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


def parse_known_users(text: str) -> frozenset[str]:
    """Parse the contents of a known-users file into a token set."""
    tokens = set()
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue
        tokens.add(line)
    return frozenset(tokens)


def load_known_users(path: Path | str) -> frozenset[str]:
    """Read and parse a known-users file.

    Raises:
        KnownUsersError: If the file cannot be read.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise KnownUsersError(f"Cannot read {path}: {e}", path=str(path)) from e

    tokens = parse_known_users(text)
    logger.info("Loaded %d known user token(s) from %s", len(tokens), path)
    return tokens
