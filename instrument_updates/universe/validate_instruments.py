"""
Instrument Schema Validation

Purpose:
- Decode the upstream body
- Prove every row is a well-formed instrument
- Hand back the rows untouched (record views are derived later)

Rules (positional):
  0 ticker      str, 1-12 chars
  1 shortName   str, 2-24 chars
  2 longName    str, 2-64 chars
  3 isinCode    2 letters, 9 letters/digits, 1 digit
  4 type        str, <= 24 chars
  5..6          ignored

Pure. No I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal
import json
import re

from instrument_updates.errors import ValidationError


ISIN_CODE_PATTERN = re.compile(r"[A-Z]{2}[A-Z0-9]{9}[0-9]")

MIN_ROW_FIELDS = 5
MAX_ROW_FIELDS = 7

# (index, name, min_len, max_len)
FIELD_RULES = [
    (0, "ticker", 1, 12),
    (1, "shortName", 2, 24),
    (2, "longName", 2, 64),
    (4, "type", 0, 24),
]


# ---------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str
    value: Any = None
    row_index: int | None = None


@dataclass
class ValidationResult:
    status: Literal["ok", "fail"]
    rows: list[list] = field(default_factory=list)
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "ok"


# ---------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------

def _row_issues(index: int, row: Any) -> list[ValidationIssue]:
    if not isinstance(row, list) or not MIN_ROW_FIELDS <= len(row) <= MAX_ROW_FIELDS:
        return [ValidationIssue("row", "invalid instrument row", row, index)]

    issues = []

    for pos, name, lo, hi in FIELD_RULES:
        value = row[pos]
        if not isinstance(value, str) or not lo <= len(value) <= hi:
            issues.append(ValidationIssue(name, f"invalid instrument {name}", value, index))

    isin = row[3]
    if not isinstance(isin, str) or not ISIN_CODE_PATTERN.fullmatch(isin):
        issues.append(ValidationIssue("isinCode", "invalid instrument isinCode", isin, index))

    return issues


def validate_payload(payload: Any) -> ValidationResult:
    """Collect every schema violation in `payload` instead of stopping at the first."""
    data = payload.get("data") if isinstance(payload, dict) else None

    if not isinstance(data, list) or not data:
        return ValidationResult(
            status="fail",
            issues=[ValidationIssue("data", "invalid data", data)],
        )

    issues = [issue for i, row in enumerate(data) for issue in _row_issues(i, row)]

    if issues:
        return ValidationResult(status="fail", issues=issues)

    return ValidationResult(status="ok", rows=data)


def require_valid(payload: Any) -> list[list]:
    """Validated rows, or ValidationError carrying the first offending element."""
    result = validate_payload(payload)

    if not result.ok:
        first = result.issues[0]
        raise ValidationError(first.message, first.value, issues=result.issues)

    return result.rows


def parse_body(body: bytes | str) -> Any:
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"upstream body is not JSON ({e})", body[:200]) from e
