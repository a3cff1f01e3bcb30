"""Pin the ``last_version`` key in the application's configure.ini."""

from __future__ import annotations

import logging
from pathlib import Path

from .readonly import clear_readonly_recursive

logger = logging.getLogger(__name__)

LAST_VERSION_KEY = "last_version"
LOCKED_VERSION = "1.0.0.0"
LOCKED_VERSION_LINE = f"{LAST_VERSION_KEY}={LOCKED_VERSION}"


def rewrite_lines(lines: list[str]) -> list[str]:
    """Replace every ``last_version`` line, or append one if there is none.

    All other lines keep their content and order.
    """
    new_lines: list[str] = []
    found = False

    for line in lines:
        if line.strip().startswith(LAST_VERSION_KEY):
            new_lines.append(LOCKED_VERSION_LINE)
            found = True
        else:
            new_lines.append(line)

    if not found:
        new_lines.append(LOCKED_VERSION_LINE)

    return new_lines


def split_lines(content: str) -> list[str]:
    """Split on ``\\n`` only, dropping one trailing ``\\r`` per line.

    Other separators such as form feed or a lone ``\\r`` stay inside the line.
    """
    if not content:
        return []
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def read_config_lines(config_path: Path) -> list[str]:
    """Read config lines, treating a missing or unreadable file as empty."""
    try:
        with config_path.open(encoding="utf-8", newline="") as f:
            content = f.read()
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", config_path, e)
        return []
    return split_lines(content)


def lock_configuration(config_path: Path) -> list[str]:
    """Rewrite config_path so it pins ``last_version=1.0.0.0``.

    The parent directory must already exist.

    Args:
        config_path: Path to configure.ini.

    Returns:
        The lines written.

    Raises:
        OSError: If the file cannot be written.

    """
    lines = rewrite_lines(read_config_lines(config_path))

    if config_path.exists():
        clear_readonly_recursive(config_path)

    with config_path.open("w", encoding="utf-8", newline="") as f:
        f.write("\n".join(lines))
    logger.debug("Locked %s to %s", config_path, LOCKED_VERSION_LINE)
    return lines
