"""Tagged-envelope codec for values JSON cannot represent natively.

A value whose type has a registered handler is written as
``{"kind": "<TypeName>", "payload": "<canonical string>"}`` and restored by
matching on ``kind``. Dicts, lists and tuples are walked recursively; every
other value passes through untouched. A plain dict whose keys are exactly
``kind`` and ``payload`` is written as a ``dict`` envelope holding its JSON
text, so it is never mistaken for a tagged value on the way back.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from functools import lru_cache
from typing import Any
from uuid import UUID

from app.core.exceptions import CodecError

ENVELOPE_KEYS = frozenset({"kind", "payload"})

# Reserved kind for plain dicts that happen to look like an envelope
ESCAPE_KIND = "dict"


@dataclass(frozen=True)
class TypeHandler:
    """How one non-native type is turned into a string and back."""

    python_type: type
    kind: str
    dump: Callable[[Any], str]
    load: Callable[[str], Any]


class Codec:
    """Encode/decode nested payloads through tagged envelopes."""

    def __init__(self) -> None:
        self._by_type: dict[type, TypeHandler] = {}
        self._by_kind: dict[str, TypeHandler] = {}

    def register(
        self,
        python_type: type,
        kind: str,
        dump: Callable[[Any], str],
        load: Callable[[str], Any],
    ) -> None:
        """Register a handler for ``python_type`` under the tag ``kind``.

        Args:
            python_type: Type to wrap on encode
            kind: Tag written into the envelope
            dump: Converts a value to its canonical string
            load: Rebuilds a value from the canonical string
        """
        if kind == ESCAPE_KIND:
            raise ValueError(f"kind '{ESCAPE_KIND}' is reserved")
        handler = TypeHandler(python_type=python_type, kind=kind, dump=dump, load=load)
        self._by_type[python_type] = handler
        self._by_kind[kind] = handler

    @property
    def kinds(self) -> frozenset[str]:
        return frozenset(self._by_kind)

    def _handler_for(self, value: Any) -> TypeHandler | None:
        handler = self._by_type.get(type(value))
        if handler is not None:
            return handler
        # Subclasses; registration order puts datetime ahead of date
        for python_type, candidate in self._by_type.items():
            if isinstance(value, python_type):
                return candidate
        return None

    def encode(self, value: Any) -> Any:
        """Return a JSON-serializable copy of ``value``."""
        if isinstance(value, dict):
            encoded = {key: self.encode(item) for key, item in value.items()}
            if encoded.keys() == ENVELOPE_KEYS:
                return {"kind": ESCAPE_KIND, "payload": json.dumps(encoded, ensure_ascii=False)}
            return encoded
        if isinstance(value, (list, tuple)):
            return [self.encode(item) for item in value]
        if value is None or isinstance(value, (str, int, float, bool)):
            return value

        handler = self._handler_for(value)
        if handler is None:
            return value
        return {"kind": handler.kind, "payload": handler.dump(value)}

    def decode(self, value: Any) -> Any:
        """Reverse :meth:`encode`.

        Raises:
            CodecError: If an envelope of a known kind carries a bad payload
        """
        if isinstance(value, list):
            return [self.decode(item) for item in value]
        if not isinstance(value, dict):
            return value

        if value.keys() == ENVELOPE_KEYS and value["kind"] == ESCAPE_KIND:
            return self._unescape(value["payload"])

        if value.keys() == ENVELOPE_KEYS and value["kind"] in self._by_kind:
            handler = self._by_kind[value["kind"]]
            payload = value["payload"]
            if not isinstance(payload, str):
                raise CodecError(handler.kind, payload)
            try:
                return handler.load(payload)
            except (ValueError, TypeError, ArithmeticError) as e:
                raise CodecError(handler.kind, payload) from e

        return {key: self.decode(item) for key, item in value.items()}

    def _unescape(self, payload: Any) -> dict:
        if not isinstance(payload, str):
            raise CodecError(ESCAPE_KIND, payload)
        try:
            inner = json.loads(payload)
        except ValueError as e:
            raise CodecError(ESCAPE_KIND, payload) from e
        if not isinstance(inner, dict) or inner.keys() != ENVELOPE_KEYS:
            raise CodecError(ESCAPE_KIND, payload)
        # Decode the members only; the dict itself is data, not an envelope
        return {key: self.decode(item) for key, item in inner.items()}

    def dumps(self, value: Any) -> str:
        """Encode and serialize to JSON text."""
        return json.dumps(self.encode(value), ensure_ascii=False)

    def loads(self, text: str) -> Any:
        """Parse JSON text and decode envelopes.

        Raises:
            json.JSONDecodeError: On malformed text
            CodecError: On a malformed envelope
        """
        return self.decode(json.loads(text))


def build_default_codec() -> Codec:
    """Codec with handlers for every non-native type the flow states hold."""
    codec = Codec()
    codec.register(datetime, "datetime", datetime.isoformat, datetime.fromisoformat)
    codec.register(date, "date", date.isoformat, date.fromisoformat)
    codec.register(Decimal, "Decimal", str, Decimal)
    codec.register(UUID, "UUID", str, UUID)
    return codec


@lru_cache
def get_codec() -> Codec:
    """Get cached default codec instance."""
    return build_default_codec()


# Convenience functions
def encode(value: Any) -> Any:
    """Encode with the default codec."""
    return get_codec().encode(value)


def decode(value: Any) -> Any:
    """Decode with the default codec."""
    return get_codec().decode(value)
