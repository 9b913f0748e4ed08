import re
from datetime import UTC, datetime

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def now() -> datetime:
    return datetime.now(UTC)


def split_camel(value: str) -> list[str]:
    """Split a camelCase identifier into its words."""
    return [part for part in _CAMEL_BOUNDARY_RE.split(value) if part]
