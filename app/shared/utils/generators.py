"""Primary key generation for RBAC rows (CUID2)."""

from cuid2 import cuid_wrapper

_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new collision-resistant id for permission, role, override and audit rows.

    Ids are generated client-side so a row's id is known before flush, which
    lets the audit row for a mutation reference it in the same transaction.
    """
    value = _cuid()
    if not isinstance(value, str):
        raise TypeError(f"Expected str from cuid2, got {type(value).__name__}")
    return value
