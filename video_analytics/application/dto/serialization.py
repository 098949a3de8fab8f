"""Result serialization for dashboard responses."""

from dataclasses import asdict, is_dataclass
from typing import Any

from video_analytics.domain.types import JsonValue


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _camel_keys(value: Any) -> JsonValue:
    if isinstance(value, dict):
        return {camel_case(str(k)): _camel_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_camel_keys(v) for v in value]
    return value


def to_json(result: Any) -> JsonValue:
    """Convert result dataclasses (or lists of them) to camelCase JSON data."""
    if is_dataclass(result) and not isinstance(result, type):
        return _camel_keys(asdict(result))
    if isinstance(result, (list, tuple)):
        return [to_json(item) for item in result]
    return _camel_keys(result)
