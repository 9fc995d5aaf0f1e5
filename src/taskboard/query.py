"""Translate textual collection query parameters into typed read specifications.

Both collections accept the same read parameters:

``where``
    JSON object describing the filter. Field keys map to plain values
    (equality) or to operator documents drawn from a closed set of
    comparison operators; ``$and``/``$or``/``$nor`` combine nested filters.
``sort``
    JSON object of ``{field: direction}`` or a JSON string such as
    ``"name -deadline"``.
``select`` (legacy alias ``filter``)
    JSON object of ``{field: 0|1}`` or a JSON string such as ``"name deadline"``.
``skip`` / ``limit``
    Non-negative integers.
``count``
    ``"true"`` to request the number of matches instead of the documents.

Parameters are processed in that order and the first malformed one raises
:class:`~taskboard.errors.ValidationError` naming it; nothing after it is read.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .errors import ValidationError

FieldCaster = Callable[[Any], Any]


class ComparisonOperator(str, Enum):
    """Operators accepted inside a field's operator document."""

    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    NIN = "$nin"
    ALL = "$all"
    EXISTS = "$exists"
    SIZE = "$size"
    REGEX = "$regex"


class LogicalOperator(str, Enum):
    """Operators combining nested filter documents."""

    AND = "$and"
    OR = "$or"
    NOR = "$nor"


class SortDirection(int, Enum):
    ASCENDING = 1
    DESCENDING = -1


_LIST_OPERATORS = {ComparisonOperator.IN, ComparisonOperator.NIN, ComparisonOperator.ALL}
_REGEX_OPTIONS = set("imsx")
_SORT_DIRECTIONS: dict[Any, SortDirection] = {
    1: SortDirection.ASCENDING,
    -1: SortDirection.DESCENDING,
    "1": SortDirection.ASCENDING,
    "-1": SortDirection.DESCENDING,
    "asc": SortDirection.ASCENDING,
    "ascending": SortDirection.ASCENDING,
    "desc": SortDirection.DESCENDING,
    "descending": SortDirection.DESCENDING,
}


@dataclass(frozen=True, slots=True)
class FieldCondition:
    """A single comparison applied to one document field."""

    field: str
    operator: ComparisonOperator
    operand: Any
    options: str | None = None

    def to_mongo(self) -> dict[str, Any]:
        if self.operator is ComparisonOperator.EQ and not isinstance(self.operand, dict):
            return {self.field: self.operand}
        if self.operator is ComparisonOperator.REGEX and self.options:
            return {self.field: {"$regex": self.operand, "$options": self.options}}
        return {self.field: {self.operator.value: self.operand}}


@dataclass(frozen=True, slots=True)
class LogicalCondition:
    """A logical combination of nested filters."""

    operator: LogicalOperator
    clauses: tuple["Conjunction", ...]

    def to_mongo(self) -> dict[str, Any]:
        return {self.operator.value: [clause.to_mongo() for clause in self.clauses]}


@dataclass(frozen=True, slots=True)
class Conjunction:
    """Conditions that must all hold; the root of every filter expression."""

    conditions: tuple[Union[FieldCondition, LogicalCondition], ...] = ()

    def to_mongo(self) -> dict[str, Any]:
        documents = [condition.to_mongo() for condition in self.conditions]
        merged: dict[str, Any] = {}
        for document in documents:
            if any(key in merged for key in document):
                return {"$and": documents}
            merged.update(document)
        return merged


FilterExpression = Union[FieldCondition, LogicalCondition, Conjunction]


@dataclass(frozen=True, slots=True)
class SortKey:
    field: str
    direction: SortDirection = SortDirection.ASCENDING


@dataclass(frozen=True, slots=True)
class Projection:
    """Field inclusion (``True``) or exclusion (``False``) flags."""

    fields: tuple[tuple[str, bool], ...]

    def to_mongo(self) -> dict[str, int]:
        return {name: int(included) for name, included in self.fields}


@dataclass(frozen=True, slots=True)
class ReadSpec:
    """Normalised description of a collection read."""

    filter: Conjunction
    sort: tuple[SortKey, ...] | None = None
    projection: Projection | None = None
    skip: int = 0
    limit: int | None = None
    count: bool = False

    @property
    def mongo_filter(self) -> dict[str, Any]:
        return self.filter.to_mongo()

    @property
    def mongo_sort(self) -> list[tuple[str, int]] | None:
        if not self.sort:
            return None
        return [(key.field, key.direction.value) for key in self.sort]

    @property
    def mongo_projection(self) -> dict[str, int] | None:
        if self.projection is None:
            return None
        return self.projection.to_mongo()


def _invalid(parameter: str, reason: str) -> ValidationError:
    return ValidationError(f"Invalid {parameter}: {reason}", details={"parameter": parameter})


def _decode_json(raw: Any, parameter: str) -> Any:
    if raw is None:
        return None
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ValidationError(
            f"Invalid JSON for {parameter}",
            details={"parameter": parameter},
        ) from exc


def _cast(caster: FieldCaster | None, value: Any, field: str) -> Any:
    if caster is None:
        return value
    try:
        return caster(value)
    except (TypeError, ValueError) as exc:
        raise _invalid("where", f"cannot interpret {value!r} for field {field!r}") from exc


def _check_operand(
    field: str,
    operator: ComparisonOperator,
    operand: Any,
    caster: FieldCaster | None,
) -> Any:
    if operator in _LIST_OPERATORS:
        if not isinstance(operand, list):
            raise _invalid("where", f"{operator.value} on {field!r} expects a list")
        return [_cast(caster, item, field) for item in operand]
    if operator is ComparisonOperator.EXISTS:
        if isinstance(operand, bool) or operand in (0, 1):
            return bool(operand)
        raise _invalid("where", f"$exists on {field!r} expects a boolean")
    if operator is ComparisonOperator.SIZE:
        if isinstance(operand, bool) or not isinstance(operand, int) or operand < 0:
            raise _invalid("where", f"$size on {field!r} expects a non-negative integer")
        return operand
    if operator is ComparisonOperator.REGEX:
        if not isinstance(operand, str):
            raise _invalid("where", f"$regex on {field!r} expects a string")
        try:
            re.compile(operand)
        except re.error as exc:
            raise _invalid("where", f"bad pattern for {field!r}") from exc
        return operand
    return _cast(caster, operand, field)


def _parse_field(
    field: str,
    value: Any,
    casts: Mapping[str, FieldCaster],
) -> Iterator[FieldCondition]:
    caster = casts.get(field)
    if not isinstance(value, dict) or not value:
        yield FieldCondition(field, ComparisonOperator.EQ, _cast(caster, value, field))
        return

    operator_keys = [key for key in value if key.startswith("$")]
    if not operator_keys:
        yield FieldCondition(field, ComparisonOperator.EQ, value)
        return
    if len(operator_keys) != len(value):
        raise _invalid("where", f"field {field!r} mixes operators and plain keys")

    options = value.get("$options")
    if options is not None:
        if "$regex" not in value:
            raise _invalid("where", "$options is only valid alongside $regex")
        if not isinstance(options, str) or not set(options) <= _REGEX_OPTIONS:
            raise _invalid("where", f"unsupported regex options {options!r}")

    for name, operand in value.items():
        if name == "$options":
            continue
        try:
            operator = ComparisonOperator(name)
        except ValueError:
            raise _invalid("where", f"unsupported operator {name!r}") from None
        yield FieldCondition(
            field,
            operator,
            _check_operand(field, operator, operand, caster),
            options if operator is ComparisonOperator.REGEX else None,
        )


def parse_filter(document: Any, casts: Mapping[str, FieldCaster] | None = None) -> Conjunction:
    """Parse a decoded ``where`` document into a closed filter expression."""

    casts = casts or {}
    if document is None:
        return Conjunction()
    if not isinstance(document, dict):
        raise _invalid("where", "expected a JSON object")

    conditions: list[FieldCondition | LogicalCondition] = []
    for key, value in document.items():
        if not isinstance(key, str) or not key:
            raise _invalid("where", "field names must be non-empty strings")
        if key.startswith("$"):
            try:
                operator = LogicalOperator(key)
            except ValueError:
                raise _invalid("where", f"unsupported operator {key!r}") from None
            if (
                not isinstance(value, list)
                or not value
                or not all(isinstance(item, dict) for item in value)
            ):
                raise _invalid("where", f"{key} expects a non-empty list of objects")
            clauses = tuple(parse_filter(item, casts) for item in value)
            conditions.append(LogicalCondition(operator, clauses))
        else:
            conditions.extend(_parse_field(key, value, casts))
    return Conjunction(tuple(conditions))


def parse_sort(document: Any) -> tuple[SortKey, ...] | None:
    """Parse a decoded ``sort`` value into ordered sort keys."""

    if document is None:
        return None
    keys: list[SortKey] = []
    if isinstance(document, str):
        for token in document.split():
            if token.startswith("-"):
                keys.append(SortKey(token[1:], SortDirection.DESCENDING))
            else:
                keys.append(SortKey(token.lstrip("+")))
    elif isinstance(document, dict):
        for field, raw_direction in document.items():
            lookup = raw_direction.lower() if isinstance(raw_direction, str) else raw_direction
            if isinstance(lookup, bool) or not isinstance(lookup, (int, str)) or lookup not in _SORT_DIRECTIONS:
                raise _invalid("sort", f"unsupported direction {raw_direction!r} for {field!r}")
            keys.append(SortKey(field, _SORT_DIRECTIONS[lookup]))
    else:
        raise _invalid("sort", "expected a JSON object or string")
    if any(not key.field for key in keys):
        raise _invalid("sort", "field names must be non-empty")
    return tuple(keys) or None


def parse_projection(document: Any, parameter: str = "select") -> Projection | None:
    """Parse a decoded ``select`` value into field inclusion flags."""

    if document is None:
        return None
    fields: list[tuple[str, bool]] = []
    if isinstance(document, str):
        for token in document.split():
            if token.startswith("-"):
                fields.append((token[1:], False))
            else:
                fields.append((token.lstrip("+"), True))
    elif isinstance(document, dict):
        for field, flag in document.items():
            if isinstance(flag, bool):
                fields.append((field, flag))
            elif flag in (0, 1):
                fields.append((field, bool(flag)))
            else:
                raise _invalid(parameter, f"unsupported flag {flag!r} for {field!r}")
    else:
        raise _invalid(parameter, "expected a JSON object or string")

    if any(not name for name, _ in fields):
        raise _invalid(parameter, "field names must be non-empty")
    modes = {included for name, included in fields if name != "_id"}
    if len(modes) > 1:
        raise _invalid(parameter, "cannot mix inclusion and exclusion")
    return Projection(tuple(fields)) if fields else None


def _parse_non_negative(raw: Any, parameter: str, default: int | None) -> int | None:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    if isinstance(raw, bool):
        raise _invalid(parameter, "expected a non-negative integer")
    try:
        value = int(raw.strip()) if isinstance(raw, str) else int(raw)
    except (TypeError, ValueError):
        raise _invalid(parameter, "expected a non-negative integer") from None
    if value < 0:
        raise _invalid(parameter, "expected a non-negative integer")
    return value


def _parse_flag(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return isinstance(raw, str) and raw.strip().lower() == "true"


def _projection_source(params: Mapping[str, Any]) -> tuple[Any, str]:
    if params.get("select") is not None:
        return params["select"], "select"
    return params.get("filter"), "filter"


def translate_projection(params: Mapping[str, Any]) -> Projection | None:
    """Translate only ``select`` (or its legacy alias ``filter``)."""

    raw, parameter = _projection_source(params)
    return parse_projection(_decode_json(raw, parameter), parameter)


def translate_query(
    params: Mapping[str, Any],
    *,
    default_limit: int | None = None,
    casts: Mapping[str, FieldCaster] | None = None,
) -> ReadSpec:
    """Translate raw query parameters into a :class:`ReadSpec`."""

    where = parse_filter(_decode_json(params.get("where"), "where"), casts)
    sort = parse_sort(_decode_json(params.get("sort"), "sort"))
    projection = translate_projection(params)
    skip = _parse_non_negative(params.get("skip"), "skip", 0) or 0
    limit = _parse_non_negative(params.get("limit"), "limit", default_limit)
    count = _parse_flag(params.get("count"))
    return ReadSpec(
        filter=where,
        sort=sort,
        projection=projection,
        skip=skip,
        limit=limit,
        count=count,
    )


__all__ = [
    "ComparisonOperator",
    "Conjunction",
    "FieldCaster",
    "FieldCondition",
    "FilterExpression",
    "LogicalCondition",
    "LogicalOperator",
    "Projection",
    "ReadSpec",
    "SortDirection",
    "SortKey",
    "parse_filter",
    "parse_projection",
    "parse_sort",
    "translate_projection",
    "translate_query",
]
