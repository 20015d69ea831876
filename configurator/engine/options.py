"""Resolution of stored selection values to catalog options."""

from typing import Any

from configurator.protocols.catalog import VariationAxis, VariationKind, VariationOption
from configurator.selection import is_option_id

YES_LABELS = frozenset({"yes", "true", "on"})
NO_LABELS = frozenset({"no", "false", "off"})


def affirmative_option(axis: VariationAxis) -> VariationOption | None:
    """The "yes" option of a boolean axis."""
    for opt in axis.options:
        if opt.label.strip().lower() in YES_LABELS:
            return opt
    return None


def negative_option(axis: VariationAxis) -> VariationOption | None:
    """The "no" option of a boolean axis: labelled so, else the first non-yes option."""
    yes = affirmative_option(axis)
    for opt in axis.options:
        if opt.label.strip().lower() in NO_LABELS:
            return opt
    for opt in axis.options:
        if opt is not yes:
            return opt
    return None


def chosen_option(axis: VariationAxis, value: Any) -> VariationOption | None:
    """Option a stored value points at, or None (unset, text, or unknown id)."""
    if axis.kind.picks_option:
        return axis.option(value) if is_option_id(value) else None
    if axis.kind == VariationKind.BOOLEAN:
        if value is True:
            return affirmative_option(axis)
        if value is False:
            return negative_option(axis)
    return None


def priced_option(axis: VariationAxis, value: Any) -> VariationOption | None:
    """Option whose adjustment a stored value adds to the price.

    Booleans only charge for "yes"; "no" never credits. Text never charges.
    """
    if axis.kind == VariationKind.BOOLEAN:
        return affirmative_option(axis) if value is True else None
    return chosen_option(axis, value)


def is_satisfied(axis: VariationAxis, value: Any) -> bool:
    """True if ``value`` fills ``axis`` (used for required axes)."""
    if axis.kind == VariationKind.TEXT:
        return isinstance(value, str) and bool(value.strip())
    if axis.kind == VariationKind.BOOLEAN:
        return isinstance(value, bool)
    return is_option_id(value) and axis.option(value) is not None
