"""Path string validation and best-effort repair."""

import logging
import re
from typing import Iterable, List

from .types import MalformedPathError, PathData

logger = logging.getLogger(__name__)

VALID_COMMANDS = frozenset("MLHVCSQTAZmlhvcsqtaz")
MOVE_COMMANDS = frozenset("Mm")
CLOSE_COMMANDS = frozenset("Zz")

# Numbers (with optional exponent) are consumed first so only letter runs remain
_TOKEN_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?|[A-Za-z]+")
_FIRST_MOVE_RE = re.compile(r"[Mm]")
_REPEATED_NUMBER_RE = re.compile(r"(?<![\d.])([-+]?\d*\.?\d+)(?: \1){3}(?![\d.])")
_MISSING_SPACE_RE = re.compile(r"([MLHVCSQTAZmlhvcsqtaz])(?=[\d.+-])")


def _snippet(path: PathData) -> str:
    return f"{path[:30]}..."


def _scan_commands(path: PathData):
    """Split path data into command letters and unrecognized letter runs."""
    commands = []
    unknown = []
    for token in _TOKEN_RE.findall(path):
        if not token[0].isalpha():
            continue
        if all(ch in VALID_COMMANDS for ch in token):
            # Adjacent letters such as "ZM" are separate commands
            commands.extend(token)
        else:
            unknown.append(token)
    return commands, unknown


def validate_path(path: PathData) -> List[str]:
    """Check one path string and return its diagnostics (empty if valid)."""
    errors = []
    commands, unknown = _scan_commands(path)

    if path.strip()[:1] not in MOVE_COMMANDS:
        errors.append(f"Path does not start with a move command: {_snippet(path)}")

    if not any(cmd in CLOSE_COMMANDS for cmd in commands):
        errors.append(f"Path is not closed: {_snippet(path)}")

    for token in unknown:
        errors.append(f'Path contains unrecognized command "{token}": {_snippet(path)}')

    for prev, cmd in zip(commands, commands[1:]):
        if prev in MOVE_COMMANDS and cmd in MOVE_COMMANDS:
            errors.append(f"Path contains consecutive move commands: {_snippet(path)}")
            break

    return errors


def validate_paths(paths: Iterable[PathData]) -> List[str]:
    """
    Validate path strings.

    Checks that each path starts with a move command, contains a close
    command, uses only recognized command letters, and never has two move
    commands in a row.

    Args:
        paths: Path data strings

    Returns:
        Human-readable diagnostics tagged with each offending path's first
        30 characters; an empty list means every path is valid
    """
    errors: List[str] = []
    for path in paths:
        errors.extend(validate_path(path))
    return errors


def fix_path(path: PathData) -> PathData:
    """
    Repair common problems in a path string.

    Best effort: the result is not guaranteed to validate, callers that
    need a guarantee should validate again.

    Args:
        path: Path data string

    Returns:
        Repaired path data
    """
    fixed = path

    # Must start with a move command
    if fixed.strip()[:1] not in MOVE_COMMANDS:
        first_move = _FIRST_MOVE_RE.search(fixed)
        if first_move:
            fixed = fixed[first_move.start():]
        else:
            fixed = "M 0 0 " + fixed

    # Must be closed
    commands, _ = _scan_commands(fixed)
    if not any(cmd in CLOSE_COMMANDS for cmd in commands):
        fixed += " Z"

    # Collapse a coordinate repeated four times
    fixed = _REPEATED_NUMBER_RE.sub(r"\1 \1", fixed)

    fixed = fixed.replace("NaN", "0")

    # Insert missing space between a command letter and its first number
    fixed = _MISSING_SPACE_RE.sub(r"\1 ", fixed)

    return " ".join(fixed.split())


def fix_paths(paths: Iterable[PathData]) -> List[PathData]:
    """Repair every path string."""
    return [fix_path(path) for path in paths]


def assert_valid_paths(paths: Iterable[PathData]) -> None:
    """Raise MalformedPathError if any path fails validation."""
    errors = validate_paths(paths)
    if errors:
        raise MalformedPathError(errors)
