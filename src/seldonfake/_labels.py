"""Label selector parsing and matching."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from ._exceptions import InvalidSelectorError

__all__ = [
    "Operator",
    "Requirement",
    "Selector",
    "parse_selector",
]

_KEY = r"[A-Za-z0-9](?:[-A-Za-z0-9_./]*[A-Za-z0-9])?"
_VALUE = r"(?:[A-Za-z0-9](?:[-A-Za-z0-9_.]*[A-Za-z0-9])?)?"

_EQUALITY_REGEX = re.compile(rf"^({_KEY})\s*(==|=|!=)\s*({_VALUE})$")
_SET_REGEX = re.compile(rf"^({_KEY})\s+(in|notin)\s*\((.*)\)$")
_EXISTS_REGEX = re.compile(rf"^(!?)\s*({_KEY})$")
_VALUE_REGEX = re.compile(rf"^{_VALUE}$")


class Operator(StrEnum):
    """Operator of a single label requirement."""

    equals = "="
    not_equals = "!="
    in_ = "in"
    not_in = "notin"
    exists = "exists"
    does_not_exist = "!"


@dataclass(frozen=True)
class Requirement:
    """One clause of a label selector."""

    key: str
    """Label key the requirement applies to."""

    operator: Operator
    """How the label value is compared."""

    values: frozenset[str] = frozenset()
    """Allowed or disallowed values. Empty for existence checks."""

    def matches(self, labels: Mapping[str, str]) -> bool:
        """Check whether a set of labels satisfies this requirement."""
        match self.operator:
            case Operator.exists:
                return self.key in labels
            case Operator.does_not_exist:
                return self.key not in labels
            case Operator.equals | Operator.in_:
                return labels.get(self.key) in self.values
            case Operator.not_equals | Operator.not_in:
                # An absent label satisfies a negative requirement.
                if self.key not in labels:
                    return True
                return labels[self.key] not in self.values

    def __str__(self) -> str:
        values = sorted(self.values)
        match self.operator:
            case Operator.exists:
                return self.key
            case Operator.does_not_exist:
                return f"!{self.key}"
            case Operator.equals | Operator.not_equals:
                return f"{self.key}{self.operator.value}{values[0]}"
            case Operator.in_ | Operator.not_in:
                joined = ",".join(values)
                return f"{self.key} {self.operator.value} ({joined})"


@dataclass(frozen=True)
class Selector:
    """A parsed label selector. All requirements must match."""

    requirements: tuple[Requirement, ...] = ()

    @property
    def empty(self) -> bool:
        """Whether this selector matches everything."""
        return not self.requirements

    @classmethod
    def from_labels(cls, labels: Mapping[str, str]) -> Selector:
        """Build an equality selector requiring every given label."""
        requirements = tuple(
            Requirement(key, Operator.equals, frozenset([value]))
            for key, value in sorted(labels.items())
        )
        return cls(requirements)

    def matches(self, labels: Mapping[str, str] | None) -> bool:
        """Check whether an object's labels match this selector.

        Parameters
        ----------
        labels
            Labels of the object, or `None` if it has none.

        Returns
        -------
        bool
            Whether every requirement is satisfied.
        """
        labels = labels or {}
        return all(r.matches(labels) for r in self.requirements)

    def __str__(self) -> str:
        return ",".join(str(r) for r in self.requirements)


def _split_requirements(selector: str) -> list[str]:
    """Split a selector on commas that are not inside parentheses."""
    parts = []
    depth = 0
    current: list[str] = []
    for char in selector:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise InvalidSelectorError(f"Unbalanced ) in {selector!r}")
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise InvalidSelectorError(f"Unbalanced ( in {selector!r}")
    parts.append("".join(current))
    return parts


def _parse_requirement(text: str) -> Requirement:
    """Parse one clause of a label selector."""
    text = text.strip()
    if not text:
        raise InvalidSelectorError("Empty requirement in label selector")

    if match := _SET_REGEX.match(text):
        key, operator, raw_values = match.groups()
        values = [v.strip() for v in raw_values.split(",")]
        if not values or not all(values):
            msg = f"Empty value in set requirement {text!r}"
            raise InvalidSelectorError(msg)
        for value in values:
            if not _VALUE_REGEX.match(value):
                raise InvalidSelectorError(f"Invalid label value {value!r}")
        op = Operator.in_ if operator == "in" else Operator.not_in
        return Requirement(key, op, frozenset(values))

    if match := _EQUALITY_REGEX.match(text):
        key, operator, value = match.groups()
        op = Operator.not_equals if operator == "!=" else Operator.equals
        return Requirement(key, op, frozenset([value]))

    if match := _EXISTS_REGEX.match(text):
        negated, key = match.groups()
        op = Operator.does_not_exist if negated else Operator.exists
        return Requirement(key, op)

    raise InvalidSelectorError(f"Invalid label selector requirement {text!r}")


def parse_selector(selector: str | None) -> Selector:
    """Parse a label selector string.

    Supports the full Kubernetes label selector syntax: equality (``=``,
    ``==``, ``!=``), set membership (``in``, ``notin``), and existence
    (``key`` and ``!key``), joined with commas.

    Parameters
    ----------
    selector
        Selector string. `None` or a blank string selects everything.

    Returns
    -------
    Selector
        Parsed selector.

    Raises
    ------
    InvalidSelectorError
        Raised if the selector is not valid syntax.
    """
    if selector is None or not selector.strip():
        return Selector()
    parts = _split_requirements(selector)
    return Selector(tuple(_parse_requirement(p) for p in parts))
