"""
Response envelope decoding and endpoint descriptors.

Every service response is a JSON object with a boolean ``success`` field.
On success the remaining fields carry the endpoint payload; on failure
they may be absent, so the decoder checks the envelope first and only
then validates the payload against the endpoint's schema.

Decoding never aborts the caller: malformed bodies become JsonParseError,
``success: false`` becomes RemoteOperationFailedError, unless the
endpoint declares ``absent_on_failure`` in which case the result is None.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from operator import itemgetter
from typing import Any, Callable, Generic, TypeVar

import jsonschema  # type: ignore[import-untyped]

from chia_rpc.errors import JsonParseError, RemoteOperationFailedError

log = logging.getLogger(__name__)

T = TypeVar("T")


def _is_strict_integer(checker: Any, instance: Any) -> bool:
    return isinstance(instance, int) and not isinstance(instance, bool)


# JSON Schema counts 5.0 as an integer; fields typed int here must be ints.
StrictValidator = jsonschema.validators.extend(
    jsonschema.Draft202012Validator,
    type_checker=jsonschema.Draft202012Validator.TYPE_CHECKER.redefine(
        "integer", _is_strict_integer
    ),
)

# =========================================================================
# Schema fragments for payload fields
# =========================================================================

OBJECT: dict[str, Any] = {"type": "object"}
NULLABLE_OBJECT: dict[str, Any] = {"type": ["object", "null"]}
OBJECT_ARRAY: dict[str, Any] = {"type": "array", "items": {"type": "object"}}
STRING: dict[str, Any] = {"type": "string"}
STRING_ARRAY: dict[str, Any] = {"type": "array", "items": {"type": "string"}}
INTEGER: dict[str, Any] = {"type": "integer", "minimum": 0}
NUMBER: dict[str, Any] = {"type": "number"}
BOOLEAN: dict[str, Any] = {"type": "boolean"}
OBJECT_MAP: dict[str, Any] = {"type": "object", "additionalProperties": {"type": "object"}}

ENVELOPE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["success"],
    "properties": {"success": BOOLEAN},
}


@dataclass(frozen=True)
class Endpoint(Generic[T]):
    """Declarative description of one remote operation.

    Attributes:
        name: Endpoint name, used verbatim as the URL path.
        payload: Schema of each field required in a successful response,
            keyed by field name.
        extract: Pulls the method's return value out of the decoded object.
        absent_on_failure: Treat ``success: false`` as "not found" and
            return None instead of raising.
        optional: Schema of fields that may be missing from a successful
            response.
    """

    name: str
    payload: dict[str, dict[str, Any]]
    extract: Callable[[dict[str, Any]], T]
    absent_on_failure: bool = False
    optional: dict[str, dict[str, Any]] = field(default_factory=dict)

    def schema(self) -> dict[str, Any]:
        """JSON schema of a successful response."""
        return {
            "type": "object",
            "required": ["success", *self.payload],
            "properties": {"success": BOOLEAN, **self.optional, **self.payload},
        }


def pick(name: str) -> Callable[[dict[str, Any]], Any]:
    """Extractor returning a single payload field."""
    return itemgetter(name)


def _validate(data: Any, schema: dict[str, Any], endpoint: str, body: str) -> None:
    try:
        jsonschema.validate(instance=data, schema=schema, cls=StrictValidator)
    except jsonschema.ValidationError as e:
        path = "/".join(str(p) for p in e.absolute_path)
        cause = f"{path}: {e.message}" if path else e.message
        raise JsonParseError(endpoint, body, cause) from e
    except RecursionError as e:
        raise JsonParseError(endpoint, body, "response nested too deeply") from e


def decode_envelope(raw: bytes, endpoint: Endpoint[T]) -> T | None:
    """Decode a response body for ``endpoint``.

    Args:
        raw: Body of a 200 response.
        endpoint: Descriptor naming the payload shape and extractor.

    Returns:
        The extracted value, or None for a failed ``absent_on_failure``
        endpoint.

    Raises:
        JsonParseError: Not JSON, no boolean ``success``, or the payload
            does not match the endpoint schema.
        RemoteOperationFailedError: ``success`` is false.
    """
    body = raw.decode("utf-8", errors="replace")
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise JsonParseError(endpoint.name, body, str(e)) from e

    _validate(data, ENVELOPE_SCHEMA, endpoint.name, body)

    if not data["success"]:
        remote_error = data.get("error")
        if not isinstance(remote_error, str):
            remote_error = None
        log.debug("%s reported failure: %s", endpoint.name, remote_error)
        if endpoint.absent_on_failure:
            return None
        raise RemoteOperationFailedError(endpoint.name, remote_error)

    _validate(data, endpoint.schema(), endpoint.name, body)
    return endpoint.extract(data)
