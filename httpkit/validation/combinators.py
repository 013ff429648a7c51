"""Composable predicates with human-readable descriptions."""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Iterable


@dataclass(frozen=True)
class Predicate:
    """A boolean test over a value paired with the condition it checks."""

    test: Callable[[Any], bool]
    description: str

    def __call__(self, value: Any) -> bool:
        return self.test(value)


def type_tag(value: Any) -> str:
    """Return the dynamic type tag of ``value``.

    Tags are ``null``, ``boolean``, ``number``, ``string``, ``array`` and
    ``object``; anything that is not one of the first five is an object.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    return "object"


def _describe(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)


def _comparison(description: str, compare: Callable[[Any], bool]) -> Predicate:
    def test(value: Any) -> bool:
        try:
            return bool(compare(value))
        except TypeError:
            return False

    return Predicate(test, description)


def not_(predicate: Predicate) -> Predicate:
    return Predicate(
        lambda value: not predicate(value), f"NOT : \n {predicate.description}"
    )


def equal(expected: Any) -> Predicate:
    """Strict equality: the type tags must match as well as the values."""
    return _comparison(
        f"equal to {_describe(expected)}",
        lambda value: type_tag(value) == type_tag(expected) and value == expected,
    )


def greater_than(bound: Any) -> Predicate:
    return _comparison(f"greater than {bound}", lambda value: value > bound)


def greater_or_equal(bound: Any) -> Predicate:
    return _comparison(
        f"greater than or equal to {bound}", lambda value: value >= bound
    )


def less_than(bound: Any) -> Predicate:
    return _comparison(f"less than {bound}", lambda value: value < bound)


def less_or_equal(bound: Any) -> Predicate:
    return _comparison(f"less than or equal to {bound}", lambda value: value <= bound)


def between(min_value: Any, max_value: Any) -> Predicate:
    """Inclusive range check."""
    return _comparison(
        f"between {min_value} and {max_value}",
        lambda value: min_value <= value <= max_value,
    )


def is_of_type(name: str) -> Predicate:
    return Predicate(lambda value: type_tag(value) == name, f"of type {name}")


def is_number() -> Predicate:
    return is_of_type("number")


def is_string(length: int = -1) -> Predicate:
    """Match strings, of exactly ``length`` characters when ``length >= 0``."""
    if length >= 0:
        return Predicate(
            lambda value: isinstance(value, str) and len(value) == length,
            f"a string of length: {length}",
        )
    return is_of_type("string")


def is_object() -> Predicate:
    return is_of_type("object")


def is_array(length: int = -1) -> Predicate:
    """Match arrays holding at least ``length`` items when ``length >= 0``."""
    description = "an array"
    if length >= 0:
        description = f"an array of minimal length: {length}"
    return Predicate(
        lambda value: type_tag(value) == "array"
        and (length < 0 or len(value) >= length),
        description,
    )


def _has_property(value: Any, name: str) -> bool:
    if isinstance(value, Mapping):
        return name in value
    if type_tag(value) != "object":
        return False
    return hasattr(value, name)


def has_properties(names: Iterable[str]) -> Predicate:
    names = list(names)
    return Predicate(
        lambda value: all(_has_property(value, name) for name in names),
        f"have properties: {json.dumps(names, separators=(',', ':'))}",
    )


def _join(label: str, predicates: list[Predicate]) -> str:
    return label + "".join(f"\n- {predicate.description}" for predicate in predicates)


def and_(predicates: Iterable[Predicate]) -> Predicate:
    """Pass when every predicate passes; an empty list always passes."""
    predicates = list(predicates)
    return Predicate(
        lambda value: all(predicate(value) for predicate in predicates),
        _join("AND : ", predicates),
    )


def or_(predicates: Iterable[Predicate]) -> Predicate:
    """Pass when any predicate passes; an empty list never passes."""
    predicates = list(predicates)
    return Predicate(
        lambda value: any(predicate(value) for predicate in predicates),
        _join("OR : ", predicates),
    )


def always_true() -> Predicate:
    return Predicate(lambda value: True, "")
