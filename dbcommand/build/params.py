"""Parameter sets: binding, merging, per-statement partitioning and rendering.

Names are normalised without the leading colon, so ``":id"`` and ``"id"``
address the same parameter.  A set is either named (string keys) or
positional (integer keys counted from 0); the two never mix.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from dbcommand.build.quoter import Quoter
from dbcommand.build.scanner import Placeholder, find_placeholders, replace_placeholders
from dbcommand.errors import InvalidArgumentError
from dbcommand.schema.dialect import ParamStyle
from dbcommand.schema.values import is_scalar

Key = str | int


def normalize_name(name: Key) -> Key:
    """Strip the leading ``:`` from a parameter name."""
    if isinstance(name, str):
        return name[1:] if name.startswith(":") else name
    return name


class ParameterSet:
    """An ordered mapping of placeholder name (or position) to value.

    Args:
        params: Initial values, either a mapping of names or a sequence of
            positional values.
    """

    def __init__(self, params: Mapping[Key, Any] | Sequence[Any] | None = None) -> None:
        self._values: dict[Key, Any] = {}
        if params is not None:
            self.bind_all(params)

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def bind(self, name: Key, value: Any) -> ParameterSet:
        """Bind ``value`` to ``name`` (or to a 0-based position)."""
        key = normalize_name(name)
        if isinstance(key, bool) or not isinstance(key, (str, int)) or key == "":
            raise InvalidArgumentError(
                f"Invalid parameter name: {name!r}.", details={"name": repr(name)}
            )
        if self._values and isinstance(key, int) != self.is_positional:
            raise InvalidArgumentError(
                "Cannot mix named and positional parameters in one statement.",
                details={"name": repr(name)},
            )
        if not is_scalar(value):
            raise InvalidArgumentError(
                f"Parameter '{key}' has unsupported value of type '{type(value).__name__}'.",
                details={"name": key, "type": type(value).__name__},
            )
        self._values[key] = value
        return self

    def bind_all(self, params: Mapping[Key, Any] | Sequence[Any]) -> ParameterSet:
        """Bind every entry of a mapping, or every item of a sequence by position."""
        if isinstance(params, ParameterSet):
            items = list(params.items())
        elif isinstance(params, Mapping):
            items = list(params.items())
        elif isinstance(params, (str, bytes)) or not isinstance(params, Sequence):
            raise InvalidArgumentError(
                "Parameters must be a mapping or a sequence.",
                details={"type": type(params).__name__},
            )
        else:
            items = list(enumerate(params))
        for name, value in items:
            self.bind(name, value)
        return self

    def merge(self, other: ParameterSet | Mapping[Key, Any] | Sequence[Any]) -> ParameterSet:
        """Return a new set with ``other`` applied over this one.

        Later values override earlier ones on collision; first-appearance
        order is kept.
        """
        merged = self.copy()
        merged.bind_all(other)
        return merged

    def copy(self) -> ParameterSet:
        clone = ParameterSet()
        clone._values = dict(self._values)
        return clone

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def is_positional(self) -> bool:
        return bool(self._values) and isinstance(next(iter(self._values)), int)

    def items(self) -> Iterator[tuple[Key, Any]]:
        return iter(self._values.items())

    def as_dict(self) -> dict[Key, Any]:
        return dict(self._values)

    def to_driver(self) -> dict[str, Any] | list[Any]:
        """Return the values in the shape the DB-API driver expects."""
        if self.is_positional:
            return self._positional_values()
        return dict(self._values)  # type: ignore[arg-type]

    def _positional_values(self) -> list[Any]:
        positions = sorted(self._values)  # type: ignore[type-var]
        gaps = sorted(set(range(len(positions))) - set(positions))
        if gaps:
            raise InvalidArgumentError(
                f"Positional parameters must be bound without gaps; missing position(s) "
                f"{', '.join(str(p) for p in gaps)}.",
                details={"missing": gaps},
            )
        return [self._values[k] for k in positions]

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, name: object) -> bool:
        return normalize_name(name) in self._values  # type: ignore[arg-type]

    def __getitem__(self, name: Key) -> Any:
        return self._values[normalize_name(name)]

    def __iter__(self) -> Iterator[Key]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ParameterSet):
            return list(self._values.items()) == list(other._values.items())
        return NotImplemented

    def __repr__(self) -> str:
        return f"ParameterSet({self._values!r})"

    # ------------------------------------------------------------------
    # Statement-aware operations
    # ------------------------------------------------------------------

    def missing(self, sql: str) -> list[str]:
        """Return placeholders in ``sql`` that have no bound value."""
        placeholders = find_placeholders(sql)
        missing: list[str] = []
        position = 0
        for placeholder in placeholders:
            if placeholder.is_positional:
                if position not in self._values:
                    missing.append(f"?{position + 1}")
                position += 1
            elif placeholder.name not in self._values and f":{placeholder.name}" not in missing:
                missing.append(f":{placeholder.name}")
        return missing

    def partition(self, statements: Sequence[str]) -> list[ParameterSet]:
        """Split this set so each statement receives only what it references.

        Named values keep their original relative order.  Positional values
        are consumed in order, one per ``?`` marker, and renumbered from 0
        for each statement.
        """
        parts: list[ParameterSet] = []
        if self.is_positional:
            values = self._positional_values()
            offset = 0
            for sql in statements:
                count = sum(1 for p in find_placeholders(sql) if p.is_positional)
                parts.append(ParameterSet(values[offset : offset + count]))
                offset += count
            return parts

        for sql in statements:
            referenced = {p.name for p in find_placeholders(sql) if not p.is_positional}
            part = ParameterSet()
            part._values = {k: v for k, v in self._values.items() if k in referenced}
            parts.append(part)
        return parts


def interpolate(sql: str, params: ParameterSet, quoter: Quoter) -> str:
    """Return ``sql`` with bound values inlined as literals, for diagnostics.

    Named placeholders are matched as whole tokens; unbound placeholders
    are left in place.
    """
    if not len(params):
        return sql

    def inline(placeholder: Placeholder, position: int) -> str:
        key: Key = position if placeholder.is_positional else placeholder.name  # type: ignore[assignment]
        if key in params:
            return quoter.quote_value(params[key])
        return "?" if placeholder.is_positional else f":{placeholder.name}"

    return replace_placeholders(sql, inline)


def render(sql: str, style: ParamStyle) -> str:
    """Rewrite ``:name`` / ``?`` markers into the driver's placeholder style."""
    if style == "named":
        return sql

    def pyformat(placeholder: Placeholder, position: int) -> str:
        return "%s" if placeholder.is_positional else f"%({placeholder.name})s"

    return replace_placeholders(sql.replace("%", "%%"), pyformat)
