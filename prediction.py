"""
Prediction engine for the menopause age estimator.

Starts from a base age of 51 and subtracts fixed year penalties for each
rule an input snapshot triggers.  Rules are independent and stack: an
AMH of 0.1 crosses both AMH thresholds, an FSH of 25 crosses all three
FSH thresholds.

Text inputs are parsed leniently (leading-number prefix, NaN otherwise)
and NaN is never rejected: it fails every comparison, so a malformed
value simply triggers nothing.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Callable, List, Mapping, Sequence, Tuple

import numpy as np

import config as cfg

logger = logging.getLogger(__name__)

# ASCII digits only; whitespace stays Unicode-aware.
_INT_PREFIX = re.compile(r"\s*([+-]?[0-9]+)")
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?))"
)


# ─── Parsing ──────────────────────────────────────────────────────────

def parse_int(text: str) -> float:
    """Leading base-10 integer of ``text`` ("45.9" -> 45.0), else NaN.

    Returned as a float so arbitrarily long digit strings overflow to
    ``inf`` instead of raising.
    """
    m = _INT_PREFIX.match(text or "")
    if m is None:
        return np.nan
    return float(m.group(1))


def parse_float(text: str) -> float:
    """Leading decimal number of ``text`` ("0.3ng" -> 0.3), else NaN."""
    m = _FLOAT_PREFIX.match(text or "")
    if m is None:
        return np.nan
    return float(m.group(1).replace("Infinity", "inf"))


# ─── Data Classes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class InputSnapshot:
    """Parsed form values at the moment of a compute."""

    current_age: float           # whole years, or NaN
    amh: float                   # ng/mL, or NaN
    fsh: float                   # IU/L, or NaN
    family_history: str = cfg.NO
    autoimmune: str = cfg.NO
    chemo: str = cfg.NO


@dataclass(frozen=True)
class PredictionResult:
    """Outcome of one compute; replaced wholesale by the next."""

    expected_menopause_age: int
    years_remaining: float       # >= 0, or NaN when age is NaN
    adjustments: int             # sum of triggered penalties (<= 0)
    risk_level: str
    risk_color: str
    current_age: float


@dataclass(frozen=True)
class Rule:
    rule_id: str
    applies: Callable[[InputSnapshot], bool]
    years: int
    reason: str
    risk_factor: bool = False   # yes/no flag rather than a lab threshold


# Evaluation order is also explanation order.
RULES: Tuple[Rule, ...] = (
    Rule("amh_low", lambda s: s.amh < cfg.AMH_LOW,
         cfg.AMH_LOW_PENALTY, cfg.REASON_AMH_LOW),
    Rule("amh_very_low", lambda s: s.amh < cfg.AMH_VERY_LOW,
         cfg.AMH_VERY_LOW_PENALTY, cfg.REASON_AMH_VERY_LOW),
    Rule("fsh_mild", lambda s: s.fsh > cfg.FSH_MILD,
         cfg.FSH_PENALTY, cfg.REASON_FSH_MILD),
    Rule("fsh_high", lambda s: s.fsh > cfg.FSH_HIGH,
         cfg.FSH_PENALTY, cfg.REASON_FSH_HIGH),
    Rule("fsh_very_high", lambda s: s.fsh > cfg.FSH_VERY_HIGH,
         cfg.FSH_PENALTY, cfg.REASON_FSH_VERY_HIGH),
    Rule("family_history", lambda s: s.family_history == cfg.YES,
         cfg.FAMILY_HISTORY_PENALTY, cfg.REASON_FAMILY_HISTORY, risk_factor=True),
    Rule("autoimmune", lambda s: s.autoimmune == cfg.YES,
         cfg.AUTOIMMUNE_PENALTY, cfg.REASON_AUTOIMMUNE, risk_factor=True),
    Rule("chemo", lambda s: s.chemo == cfg.YES,
         cfg.CHEMO_PENALTY, cfg.REASON_CHEMO, risk_factor=True),
)


def snapshot_from_inputs(inputs: Mapping[str, str]) -> InputSnapshot:
    """Build a snapshot from the raw form mapping (camelCase field names)."""
    return InputSnapshot(
        current_age=parse_int(inputs.get("currentAge", "")),
        amh=parse_float(inputs.get("amh", "")),
        fsh=parse_float(inputs.get("fsh", "")),
        family_history=inputs.get("familyHistory", cfg.NO),
        autoimmune=inputs.get("autoimmune", cfg.NO),
        chemo=inputs.get("chemo", cfg.NO),
    )


# ─── Scoring ──────────────────────────────────────────────────────────

def classify_risk(age: float, amh: float) -> Tuple[str, str]:
    """Risk tier from raw age and AMH; returns (label, colour).

    Uses inclusive bounds, unlike the strict thresholds of the year
    penalties, and ignores the adjusted age entirely.
    """
    if age < cfg.RISK_AGE_LIMIT and amh <= cfg.RISK_AMH_HIGHEST:
        return cfg.RISK_HIGHEST
    if age < cfg.RISK_AGE_LIMIT and amh <= cfg.RISK_AMH_ELEVATED:
        return cfg.RISK_ELEVATED
    return cfg.RISK_NORMAL


def _years_remaining(expected: int, age: float) -> float:
    diff = expected - age
    if math.isnan(diff):
        return diff
    return max(0, diff)


def triggered_rules(snapshot: InputSnapshot) -> List[Rule]:
    return [rule for rule in RULES if rule.applies(snapshot)]


def calculate_prediction(
    snapshot: InputSnapshot,
) -> Tuple[PredictionResult, List[str]]:
    """Score a snapshot.  Never raises for any parsed input."""
    fired = triggered_rules(snapshot)
    adjustments = sum(rule.years for rule in fired)
    reasons = [rule.reason for rule in fired]

    expected = cfg.BASE_MENOPAUSE_AGE + adjustments
    risk_level, risk_color = classify_risk(snapshot.current_age, snapshot.amh)

    logger.debug("rules fired=%s adjustments=%d tier=%s",
                 [rule.rule_id for rule in fired], adjustments, risk_color)

    result = PredictionResult(
        expected_menopause_age=expected,
        years_remaining=_years_remaining(expected, snapshot.current_age),
        adjustments=adjustments,
        risk_level=risk_level,
        risk_color=risk_color,
        current_age=snapshot.current_age,
    )
    return result, reasons


# ─── Sensitivity grid ─────────────────────────────────────────────────

def flag_adjustment(snapshot: InputSnapshot) -> int:
    """Penalty contributed by the yes/no risk factors alone."""
    return sum(rule.years for rule in RULES if rule.risk_factor and rule.applies(snapshot))


def adjustment_grid(
    amh_values: Sequence[float],
    fsh_values: Sequence[float],
    flag_years: int = 0,
) -> np.ndarray:
    """Expected menopause age over an AMH x FSH grid.

    Returns an array of shape (len(fsh_values), len(amh_values)) so it
    can be passed straight to ``imshow`` with FSH on the y-axis.  Uses
    the same thresholds as ``RULES``; ``flag_years`` is added uniformly.
    """
    amh, fsh = np.meshgrid(np.asarray(amh_values, dtype=float),
                           np.asarray(fsh_values, dtype=float))
    years = np.full(amh.shape, cfg.BASE_MENOPAUSE_AGE + flag_years, dtype=int)
    years += np.where(amh < cfg.AMH_LOW, cfg.AMH_LOW_PENALTY, 0)
    years += np.where(amh < cfg.AMH_VERY_LOW, cfg.AMH_VERY_LOW_PENALTY, 0)
    for threshold in (cfg.FSH_MILD, cfg.FSH_HIGH, cfg.FSH_VERY_HIGH):
        years += np.where(fsh > threshold, cfg.FSH_PENALTY, 0)
    return years
