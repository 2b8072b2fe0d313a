"""
Edge Proxy — Airtable Path Validator
======================================

What:  Checks the `path` query parameter before anything is sent upstream.
How:   Splits `base/table[/record...]` on "/" and compares the first two
       segments against the allow-lists.

Rules (checked in this order, first failure wins):
    missing or empty             → "Missing path parameter"
    fewer than two segments      → "Invalid path format"
    base not the allowed base    → "Invalid base ID"
    table not an allowed table   → "Invalid table ID"

Segments after the table (record ids, etc.) are not inspected. Airtable
validates those itself and answers with its own 4xx, which is relayed.
"""

from typing import Optional

from edgeproxy.config import AllowListConfig
from edgeproxy.schemas.proxy import ValidationResult

MISSING_PATH = "Missing path parameter"
INVALID_FORMAT = "Invalid path format"
INVALID_BASE = "Invalid base ID"
INVALID_TABLE = "Invalid table ID"


def validate_path(path: Optional[str], allow_list: AllowListConfig) -> ValidationResult:
    """
    Validate an Airtable `base/table[/record]` path against `allow_list`.

    Pure function: no state, no I/O. The same input always yields the same
    result.
    """
    if not path:
        return ValidationResult(valid=False, error=MISSING_PATH)

    parts = path.split("/")
    if len(parts) < 2:
        return ValidationResult(valid=False, error=INVALID_FORMAT)

    base, table = parts[0], parts[1]

    if base != allow_list.base_id:
        return ValidationResult(valid=False, error=INVALID_BASE)

    if table not in allow_list.table_ids:
        return ValidationResult(valid=False, error=INVALID_TABLE)

    return ValidationResult(valid=True)
