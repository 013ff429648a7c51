"""Fluent validator builder and the validate() entry point."""

import json
import logging
from typing import Any, Iterable, Union

from httpkit.domain.correlation_id import CorrelationLoggerAdapter
from httpkit.domain.errors import ValidationError
from httpkit.validation import combinators
from httpkit.validation.combinators import Predicate

VALIDATION_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("httpkit.validation"), {}
)


class Validator:
    """Accumulates predicates through chained calls.

    Every check appends one predicate and returns the same instance. Reading
    ``not_`` negates only the next appended check; reading it twice cancels out.
    """

    def __init__(self):
        self._instructions: list[Predicate] = []
        self._negate_next = False

    @property
    def instructions(self) -> tuple[Predicate, ...]:
        return tuple(self._instructions)

    @property
    def not_(self) -> "Validator":
        self._negate_next = not self._negate_next
        return self

    def _add(self, predicate: Predicate) -> "Validator":
        if self._negate_next:
            predicate = combinators.not_(predicate)
            self._negate_next = False
        self._instructions.append(predicate)
        return self

    def fold(self) -> Predicate:
        """Reduce the accumulated checks to a single predicate."""
        if len(self._instructions) > 1:
            return combinators.and_(self._instructions)
        if len(self._instructions) == 1:
            return self._instructions[0]
        return combinators.always_true()

    def evaluate(self, value: Any) -> bool:
        return self.fold()(value)

    def equal(self, expected: Any) -> "Validator":
        return self._add(combinators.equal(expected))

    def greater_than(self, bound: Any) -> "Validator":
        return self._add(combinators.greater_than(bound))

    def greater_or_equal(self, bound: Any) -> "Validator":
        return self._add(combinators.greater_or_equal(bound))

    def less_than(self, bound: Any) -> "Validator":
        return self._add(combinators.less_than(bound))

    def less_or_equal(self, bound: Any) -> "Validator":
        return self._add(combinators.less_or_equal(bound))

    def between(self, min_value: Any, max_value: Any) -> "Validator":
        return self._add(combinators.between(min_value, max_value))

    def is_of_type(self, name: str) -> "Validator":
        return self._add(combinators.is_of_type(name))

    def is_number(self) -> "Validator":
        return self._add(combinators.is_number())

    def is_string(self, length: int = -1) -> "Validator":
        return self._add(combinators.is_string(length))

    def is_object(self) -> "Validator":
        return self._add(combinators.is_object())

    def is_array(self, length: int = -1) -> "Validator":
        return self._add(combinators.is_array(length))

    def has_properties(self, names: Iterable[str]) -> "Validator":
        return self._add(combinators.has_properties(names))


def validator() -> Validator:
    """Return an empty validator ready for chaining."""
    return Validator()


def _serialize(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"))
    except (TypeError, ValueError):
        return repr(value)


def validate(value: Any, check: Union[Predicate, Validator]) -> None:
    """Raise ValidationError when ``value`` fails ``check``."""
    predicate = check.fold() if isinstance(check, Validator) else check
    if predicate(value):
        return
    message = f"Validation error: {_serialize(value)}  {predicate.description}"
    VALIDATION_LOGGER.info(
        "Validation failed",
        extra={"event": "validation_failed", "description": predicate.description},
    )
    raise ValidationError(400, message)
