"""Weight-class catalog for a division.

A division's classes are the NFHS standard table plus the session's custom
classes for that division, ordered by max weight. Classification floors the
body weight and picks the first class whose max is at least that weight.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.errors import ValidationError
from wrestling_roster_manager.domain.result import Err, Ok, Result
from wrestling_roster_manager.domain.session import Session
from wrestling_roster_manager.domain.weight_class import WeightClass

NOT_WEIGHED_IN: str = "N/A"

STANDARD_WEIGHT_CLASSES: tuple[WeightClass, ...] = tuple(
    WeightClass(name=str(limit), max_weight=float(limit))
    for limit in (106, 113, 120, 126, 132, 138, 144, 150, 157, 165, 175, 190, 215, 285)
)


def classes_for(division: Division, session: Session) -> tuple[WeightClass, ...]:
    combined = [*STANDARD_WEIGHT_CLASSES, *session.custom_weights(division)]
    return tuple(sorted(combined, key=lambda wc: wc.max_weight))


def catch_all_label(classes: Sequence[WeightClass]) -> str:
    if not classes:
        return NOT_WEIGHED_IN
    return f"{classes[-1].name}+"


def class_index(weight: float, classes: Sequence[WeightClass]) -> int:
    """Index of the class a weight falls in, or -1 for superheavy and non-finite weights."""
    if not math.isfinite(weight):
        return -1
    floored = math.floor(weight)
    for i, wc in enumerate(classes):
        if wc.max_weight >= floored:
            return i
    return -1


def classify(weight: float, classes: Sequence[WeightClass]) -> str:
    if not math.isfinite(weight) or weight <= 0:
        return NOT_WEIGHED_IN
    index = class_index(weight, classes)
    if index == -1:
        return catch_all_label(classes)
    return classes[index].name


def classify_standard(weight: float) -> str:
    """Class recorded on a wrestler record; wrestlers have no division of their own."""
    return classify(weight, STANDARD_WEIGHT_CLASSES)


def classify_for_division(weight: float, division: Division, session: Session) -> str:
    return classify(weight, classes_for(division, session))


def slot_index(slot: str, classes: Sequence[WeightClass]) -> int:
    for i, wc in enumerate(classes):
        if wc.name == slot:
            return i
    return -1


def slot_names(classes: Iterable[WeightClass]) -> list[str]:
    return [wc.name for wc in classes]


def custom_class_name(max_weight: float) -> str:
    return f"{max_weight:g}"


def parse_custom_classes(
    raw_maxes: Iterable[float | str],
    existing: Sequence[WeightClass] = STANDARD_WEIGHT_CLASSES,
) -> Result[tuple[WeightClass, ...], ValidationError]:
    """Turn organizer-entered max weights into custom classes.

    Entries that are blank or not positive are dropped. A class may not reuse
    the name or max of a standard class or of another custom class.
    """
    taken_names = {wc.name for wc in existing}
    taken_maxes = {wc.max_weight for wc in existing}
    parsed: list[WeightClass] = []
    for raw in raw_maxes:
        if isinstance(raw, str):
            if not raw.strip():
                continue
            try:
                max_weight = float(raw)
            except ValueError:
                return Err(ValidationError(message=f"Custom weight {raw!r} is not a number", field="max_weight"))
        else:
            max_weight = float(raw)
        if not math.isfinite(max_weight):
            return Err(ValidationError(message=f"Custom weight {raw!r} is not a finite number", field="max_weight"))
        if max_weight <= 0:
            continue
        name = custom_class_name(max_weight)
        if name in taken_names or max_weight in taken_maxes:
            return Err(ValidationError(message=f"Weight class {name} already exists", field="max_weight"))
        taken_names.add(name)
        taken_maxes.add(max_weight)
        parsed.append(WeightClass(name=name, max_weight=max_weight))
    return Ok(tuple(sorted(parsed, key=lambda wc: wc.max_weight)))
