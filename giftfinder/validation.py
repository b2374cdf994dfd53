# giftfinder/validation.py

import datetime
import math
import re
from typing import Dict, Optional, Tuple

from .config import (
    BUDGET_STEP,
    CURRENCY_SYMBOL,
    INITIAL_CHARACTERISTICS_COUNT,
    MAX_BUDGET_ABSOLUTE,
    MAX_CHARACTERISTICS_COUNT,
    MIN_BIRTH_YEAR,
    MIN_BUDGET_ABSOLUTE,
    SINGLE_CHARACTERISTIC_CHAR_LIMIT,
)
from .models import FormData


def _current_year() -> int:
    return datetime.date.today().year


def parse_birth_year(raw: str, current_year: Optional[int] = None) -> Optional[int]:
    """Returns the year if it is an integer in range, otherwise None."""
    current_year = current_year or _current_year()
    s = (raw or "").strip()
    # int() alone would take "+1990", "1_990" and non-ASCII digits
    if not re.fullmatch(r"\d{1,4}", s, re.ASCII):
        return None
    year = int(s)
    if year < MIN_BIRTH_YEAR or year > current_year:
        return None
    return year


def validate_form(form: FormData, current_year: Optional[int] = None) -> Dict[str, str]:
    """
    Per-field error messages, keyed the way the form renders them:
    characteristic<i>, year_of_birth, location, budget.
    An empty dict means the form can be submitted.
    """
    current_year = current_year or _current_year()
    errors: Dict[str, str] = {}

    chars = form.recipient_characteristics
    if not chars or not chars[0].strip():
        errors["characteristic0"] = "Please provide at least one detail about them."
    for i, c in enumerate(chars):
        if len(c) > SINGLE_CHARACTERISTIC_CHAR_LIMIT:
            errors[f"characteristic{i}"] = (
                f"Detail #{i + 1} exceeds {SINGLE_CHARACTERISTIC_CHAR_LIMIT} characters."
            )
    if len(chars) > MAX_CHARACTERISTICS_COUNT:
        errors["characteristics"] = f"Please give at most {MAX_CHARACTERISTICS_COUNT} details."

    if form.year_of_birth.strip():
        if parse_birth_year(form.year_of_birth, current_year) is None:
            errors["year_of_birth"] = f"Please enter a valid year ({MIN_BIRTH_YEAR}-{current_year})."

    if not form.location.strip():
        errors["location"] = "Please enter their location."

    if form.min_budget > form.max_budget:
        errors["budget"] = "Minimum budget cannot be greater than maximum budget."
    # Range message wins over ordering, matching the form's inline display
    if form.min_budget < MIN_BUDGET_ABSOLUTE or form.max_budget > MAX_BUDGET_ABSOLUTE:
        errors["budget"] = (
            f"Budget must be between {CURRENCY_SYMBOL}{MIN_BUDGET_ABSOLUTE} "
            f"and {CURRENCY_SYMBOL}{MAX_BUDGET_ABSOLUTE}."
        )
    elif form.min_budget % BUDGET_STEP or form.max_budget % BUDGET_STEP:
        errors.setdefault("budget", f"Budget must be in steps of {CURRENCY_SYMBOL}{BUDGET_STEP}.")

    return errors


def _snap(value: float) -> int:
    # Half-up rounding to the nearest step
    return int(math.floor(value / BUDGET_STEP + 0.5)) * BUDGET_STEP


def clamp_budget(new_min: float, new_max: float, moving: str = "min") -> Tuple[int, int]:
    """
    Snaps a proposed range to the step grid and keeps the thumbs one step apart.
    `moving` is the thumb the user dragged ("min" or "max"); it is the one
    pushed back when the thumbs would cross.
    """
    lo = max(MIN_BUDGET_ABSOLUTE, min(new_min, MAX_BUDGET_ABSOLUTE - BUDGET_STEP))
    hi = min(MAX_BUDGET_ABSOLUTE, max(new_max, MIN_BUDGET_ABSOLUTE + BUDGET_STEP))

    lo = _snap(lo)
    hi = _snap(hi)

    if lo > hi - BUDGET_STEP:
        if moving == "min":
            lo = hi - BUDGET_STEP
        else:
            hi = lo + BUDGET_STEP

    lo = max(MIN_BUDGET_ABSOLUTE, lo)
    hi = min(MAX_BUDGET_ABSOLUTE, hi)
    if lo > hi:
        if moving == "min":
            lo = hi
        else:
            hi = lo
    return lo, hi


def with_budget(form: FormData, new_min: float, new_max: float) -> FormData:
    """Applies a slider change, working out which thumb moved."""
    moving = "min" if new_min != form.min_budget else "max"
    lo, hi = clamp_budget(new_min, new_max, moving=moving)
    return form.model_copy(update={"min_budget": lo, "max_budget": hi})


def add_characteristic(form: FormData) -> FormData:
    if len(form.recipient_characteristics) >= MAX_CHARACTERISTICS_COUNT:
        return form
    chars = list(form.recipient_characteristics) + [""]
    return form.model_copy(update={"recipient_characteristics": chars})


def remove_characteristic(form: FormData, index: int) -> FormData:
    """Only the optional extra fields (past the initial ones) can be removed."""
    chars = form.recipient_characteristics
    if len(chars) <= INITIAL_CHARACTERISTICS_COUNT or index < INITIAL_CHARACTERISTICS_COUNT:
        return form
    if index >= len(chars):
        return form
    kept = [c for i, c in enumerate(chars) if i != index]
    return form.model_copy(update={"recipient_characteristics": kept})


def shift_characteristic_errors(errors: Dict[str, str], removed_index: int) -> Dict[str, str]:
    """Re-keys characteristic errors after a field is removed so they stay on their inputs."""
    out: Dict[str, str] = {}
    for key, msg in errors.items():
        m = re.fullmatch(r"characteristic(\d+)", key)
        if not m:
            out[key] = msg
            continue
        i = int(m.group(1))
        if i < removed_index:
            out[key] = msg
        elif i > removed_index:
            out[f"characteristic{i - 1}"] = msg.replace(f"Detail #{i + 1} ", f"Detail #{i} ")
    return out


def budget_label(min_budget: int, max_budget: int) -> str:
    top = f"{CURRENCY_SYMBOL}{max_budget}"
    if max_budget >= MAX_BUDGET_ABSOLUTE:
        top += "+"
    return f"{CURRENCY_SYMBOL}{min_budget} - {top}"
