"""Failure taxonomy and result helpers.

Every storage-facing operation returns a plain dict:

    {"success": True, ...payload}
    {"success": False, "kind": "<FailureKind value>", "error": "<diagnostic>"}

The kind strings are stable and safe to show to users verbatim.
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Dict


class FailureKind(str, Enum):
    OPEN_FAILED = "OpenFailed"
    INVALID_DATABASE = "InvalidDatabase"
    SCHEMA_UNAVAILABLE = "SchemaUnavailable"
    QUERY_FAILED = "QueryFailed"
    INVALID_REQUEST = "InvalidRequest"
    TRANSACTION_UNAVAILABLE = "TransactionUnavailable"
    DELETE_FAILED = "DeleteFailed"
    INSERT_FAILED = "InsertFailed"
    COMMIT_FAILED = "CommitFailed"


def ok(**payload: Any) -> Dict[str, Any]:
    result: Dict[str, Any] = {"success": True}
    result.update(payload)
    return result


def fail(kind: FailureKind, message: str, **extra: Any) -> Dict[str, Any]:
    result: Dict[str, Any] = {"success": False, "kind": kind.value, "error": message}
    result.update(extra)
    return result
