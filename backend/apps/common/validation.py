"""Operation-tagged validation primitives.

Rule functions receive the write shape and an explicit :class:`Operation`
and return a list of :class:`FieldViolation`; nothing is raised until the
caller hands the full list to :func:`ensure_valid`, so every violation of a
request is reported at once.
"""
from __future__ import annotations

from collections.abc import Iterable as IterableABC
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from apps.api.exceptions import ValidationFailed


class Operation(str, Enum):
    INSERT = "insert"
    UPDATE = "update"


@dataclass(frozen=True)
class FieldViolation:
    field_name: str
    message: str


def violations_to_dict(violations: Iterable[FieldViolation]) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for violation in violations:
        errors.setdefault(violation.field_name, []).append(violation.message)
    return errors


def ensure_valid(violations: Iterable[FieldViolation]) -> None:
    errors = violations_to_dict(violations)
    if errors:
        raise ValidationFailed(errors)


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_id_list(raw: Any) -> Tuple[List[int], List[Any]]:
    """Coerce ids to int, dropping duplicates but keeping first-seen order.

    Returns ``(ids, rejected)``; entries that are not integer ids (or a
    payload that is not a list at all) end up in ``rejected`` so the
    validator can report them.
    """
    ids: List[int] = []
    rejected: List[Any] = []
    if raw is None:
        return ids, rejected
    if isinstance(raw, (str, bytes, dict)) or not isinstance(raw, IterableABC):
        return ids, [raw]
    for value in raw:
        if isinstance(value, dict):
            value = value.get("id")
        parsed = _coerce_id(value)
        if parsed is None:
            rejected.append(value)
        elif parsed not in ids:
            ids.append(parsed)
    return ids, rejected


def rejected_ids_violations(field_name: str, rejected: Iterable[Any]) -> List[FieldViolation]:
    rejected = list(rejected)
    if not rejected:
        return []
    listed = ", ".join(repr(value) for value in rejected)
    return [FieldViolation(field_name, f"Ids must be integers, got: {listed}.")]


def check_sort_fields(page_spec, allowed: Iterable[str]) -> None:
    allowed = list(allowed)
    unknown = [key.field for key in page_spec.sort if key.field not in allowed]
    if unknown:
        raise ValidationFailed(
            {
                "sort": [
                    f"Unknown sort field '{name}'. Allowed: {', '.join(sorted(allowed))}"
                    for name in unknown
                ]
            }
        )
