import datetime
import os
import re
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar, Union

from loguru import logger

from .lingo_error import ErrorCode, LingoError

T = TypeVar("T")

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")
_WIRE_SEPARATOR = re.compile(r"[-_]")


# --- Key Transcoding ---


def _wire_key(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _client_key(key: str) -> str:
    # "uuid" segments were publicly renamed to "id": kit_uuid -> kitId, uuid -> id
    segments = ["id" if s == "uuid" else s for s in _WIRE_SEPARATOR.split(key)]
    head, tail = segments[0], segments[1:]
    return head + "".join(s[:1].upper() + s[1:] for s in tail)


def _transcode(value: Any, convert: Callable[[str], str]) -> Any:
    if isinstance(value, dict):
        return {
            (convert(k) if isinstance(k, str) else k): _transcode(v, convert)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_transcode(v, convert) for v in value]
    return value


def to_wire_keys(value: Any) -> Any:
    """
    Recursively convert every mapping key from camelCase to snake_case.

    Sequences are walked, scalars are returned unchanged.
    """
    return _transcode(value, _wire_key)


def to_client_keys(value: Any) -> Any:
    """
    Recursively convert every mapping key from snake_case to camelCase.

    Keys using the `uuid` segment are renamed to `id` on the way
    (`kit_uuid` becomes `kitId`, never `kitUuid`).
    """
    return _transcode(value, _client_key)


def deep_merge(*sources: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge mappings left to right into a new dict, recursing into nested mappings."""
    merged: Dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = deep_merge(merged[key], value)
            elif isinstance(value, dict):
                merged[key] = deep_merge(value)
            else:
                merged[key] = value
    return merged


# --- Dates and identifiers ---


def format_date(
    date: Optional[Union[datetime.datetime, datetime.date, int, str]],
) -> Optional[int]:
    """
    Convert a date to Unix epoch seconds, or None when no date is given.

    Naive datetimes are taken as UTC. Plain dates map to midnight UTC.
    Integers are taken as epoch seconds already, and strings must be
    ISO 8601 (`yyyy-mm-dd` or a full timestamp).

    Raises:
        LingoError: InvalidParams if the value is not a recognised date.
    """
    if date is None:
        return None
    if isinstance(date, bool):
        raise LingoError(ErrorCode.InvalidParams, f"Invalid date: {date!r}")
    if isinstance(date, int):
        return date
    if isinstance(date, str):
        text = date.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            date = datetime.datetime.fromisoformat(text)
        except ValueError:
            raise LingoError(
                ErrorCode.InvalidParams,
                f"Invalid date: '{date}', expected yyyy-mm-dd or an ISO 8601 timestamp",
            ) from None
    elif not isinstance(date, datetime.date):
        raise LingoError(ErrorCode.InvalidParams, f"Invalid date: {date!r}")
    if not isinstance(date, datetime.datetime):
        date = datetime.datetime(date.year, date.month, date.day)
    if date.tzinfo is None:
        date = date.replace(tzinfo=datetime.timezone.utc)
    milliseconds = int(date.timestamp() * 1000)
    return milliseconds // 1000


def parse_identifier(identifier: Optional[str]) -> Optional[str]:
    """
    Return the identifier to send to the API.

    Canonical v4 UUIDs are returned as-is. Short ids are composite strings
    (e.g. `brand-colors-a1b2c3`) whose unique part is the trailing segment,
    which is what gets returned. Empty input is returned unchanged.
    """
    if not identifier:
        return identifier
    if UUID_PATTERN.match(identifier):
        return identifier
    return identifier.rsplit("-", 1)[-1]


# --- Retry ---


def retry(action: Callable[[], T], retries: int = 2) -> T:
    """
    Call `action` until it succeeds, at most `retries + 1` times.

    Attempts follow each other immediately. The exception of the last attempt
    propagates once the budget is exhausted.
    """
    max_trial = max(retries, 0) + 1
    trial = 0
    while True:
        trial += 1
        try:
            return action()
        except Exception as e:
            if trial >= max_trial:
                logger.error(f"Too many retries ({trial}/{max_trial}). Error: {e}")
                raise
            logger.warning(
                f"Error encountered. Trial={trial}/{max_trial}. Retrying.\nError: {e}"
            )


# --- File paths ---


def parse_file_path(file_path: str) -> Tuple[str, str]:
    """Split a path into its base filename (without extension) and extension (without dot)."""
    filename, extension = os.path.splitext(os.path.basename(file_path))
    return filename, extension.lstrip(".")


def resolve_file_path(file_path: str) -> str:
    """Resolve paths starting with "." against the current working directory."""
    if file_path and file_path.startswith("."):
        return os.path.normpath(os.path.join(os.getcwd(), file_path))
    return file_path
