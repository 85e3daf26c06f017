"""
Form state for the estimator page.

The state is an immutable value; every user event (keystroke, toggle
click, compute, reset) is a pure function returning the next state.
No validation happens here: any text is kept as typed until compute.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

import config as cfg
from prediction import (
    InputSnapshot,
    PredictionResult,
    calculate_prediction,
    snapshot_from_inputs,
)


@dataclass(frozen=True)
class FormState:
    inputs: Dict[str, str] = field(default_factory=lambda: dict(cfg.DEFAULT_INPUTS))
    result: Optional[PredictionResult] = None
    explanation: List[str] = field(default_factory=list)


def initial_state() -> FormState:
    return FormState()


def _check_field(name: str) -> None:
    if name not in cfg.DEFAULT_INPUTS:
        raise ValueError(f"Unknown form field: {name!r}")


def set_field(state: FormState, name: str, value: str) -> FormState:
    """Replace one input, leaving the others and any result untouched."""
    _check_field(name)
    inputs = dict(state.inputs)
    inputs[name] = value
    return replace(state, inputs=inputs)


def select_option(state: FormState, name: str, value: str) -> FormState:
    """Yes/No toggle click."""
    if name not in cfg.TOGGLE_FIELDS:
        raise ValueError(f"Not a toggle field: {name!r}")
    return set_field(state, name, value)


def reset_form(state: FormState) -> FormState:
    return initial_state()


def snapshot(state: FormState) -> InputSnapshot:
    return snapshot_from_inputs(state.inputs)


def compute(state: FormState) -> FormState:
    """Run the engine on the current inputs and replace the result."""
    result, explanation = calculate_prediction(snapshot(state))
    return replace(state, result=result, explanation=explanation)
