"""
Normalization of client payloads before they reach the store.

Forms submit every input, so an untouched optional field arrives as ``""``
and an untouched address arrives as an object of blank strings. The store
must only ever hold real values or NULL for these, never placeholders.
"""
from typing import Any, Dict, Mapping

OPTIONAL_SCALAR_FIELDS = ("phone", "email", "cpf")


def is_blank_address(address: Any) -> bool:
    """True when ``address`` is a mapping whose every value is an empty string."""
    if not isinstance(address, Mapping):
        return False
    return all(value == "" for value in address.values())


def sanitize_client_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of a (partial) client payload with blanks turned into ``None``.

    Only keys already present are touched, so a patch keeps its shape: a field
    the caller did not send is still absent from the result.
    """
    sanitized = dict(payload)

    for field in OPTIONAL_SCALAR_FIELDS:
        if sanitized.get(field) == "":
            sanitized[field] = None

    if is_blank_address(sanitized.get("address")):
        sanitized["address"] = None

    return sanitized
