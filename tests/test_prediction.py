"""
Unit tests for the prediction engine: parsing, rule stacking,
NaN propagation and risk tiers.
"""
import math

import numpy as np
import pytest

import config as cfg
from prediction import (
    RULES,
    InputSnapshot,
    adjustment_grid,
    calculate_prediction,
    classify_risk,
    flag_adjustment,
    parse_float,
    parse_int,
    snapshot_from_inputs,
)


def _snap(age="", amh="", fsh="", family="No", autoimmune="No", chemo="No"):
    return snapshot_from_inputs({
        "currentAge": age,
        "amh": amh,
        "fsh": fsh,
        "familyHistory": family,
        "autoimmune": autoimmune,
        "chemo": chemo,
    })


class TestParsing:

    @pytest.mark.parametrize("text,expected", [
        ("45", 45),
        ("  45", 45),
        ("45.9", 45),
        ("45세", 45),
        ("-3", -3),
        ("+7", 7),
    ])
    def test_parse_int_prefix(self, text, expected):
        assert parse_int(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "세45", ".5", None, "٤٥", "４５"])
    def test_parse_int_nan(self, text):
        assert math.isnan(parse_int(text))

    @pytest.mark.parametrize("text,expected", [
        ("0.3", 0.3),
        (".5", 0.5),
        ("0.3ng/mL", 0.3),
        ("12", 12.0),
        ("1e1", 10.0),
        ("1e", 1.0),
        (" -0.2", -0.2),
    ])
    def test_parse_float_prefix(self, text, expected):
        assert parse_float(text) == pytest.approx(expected)

    def test_parse_float_infinity(self):
        assert parse_float("Infinity") == math.inf
        assert parse_float("-Infinity") == -math.inf

    @pytest.mark.parametrize("text", ["", "abc", ".", "e5", "٠.٥", "０.１"])
    def test_parse_float_nan(self, text):
        assert math.isnan(parse_float(text))

    @pytest.mark.parametrize("digits", [400, 5000])
    def test_parse_int_long_digit_string_overflows(self, digits):
        assert parse_int("1" * digits) == math.inf
        assert parse_int("-" + "1" * digits) == -math.inf

    def test_parse_float_long_digit_string_overflows(self):
        assert parse_float("9" * 5000) == math.inf

    def test_snapshot_defaults(self):
        snap = snapshot_from_inputs({})
        assert math.isnan(snap.current_age)
        assert math.isnan(snap.amh)
        assert math.isnan(snap.fsh)
        assert (snap.family_history, snap.autoimmune, snap.chemo) == ("No", "No", "No")


class TestAdjustments:

    @pytest.mark.parametrize("amh,fsh", [("0.5", "10"), ("3.2", "4"), ("0.5", "")])
    def test_no_rules_fire(self, amh, fsh):
        result, explanation = calculate_prediction(_snap("30", amh, fsh))
        assert result.adjustments == 0
        assert result.expected_menopause_age == 51
        assert explanation == []

    def test_amh_rules_stack(self):
        result, explanation = calculate_prediction(_snap("45", "0.1", "5"))
        assert result.adjustments == -4
        assert explanation == ["AMH 0.5 미만 → -2년", "AMH 0.2 미만 → 추가 -2년"]

    def test_amh_threshold_is_strict(self):
        result, explanation = calculate_prediction(_snap("45", "0.2", "5"))
        assert result.adjustments == -2
        assert explanation == ["AMH 0.5 미만 → -2년"]

    def test_fsh_rules_stack(self):
        result, explanation = calculate_prediction(_snap("45", "1.0", "25"))
        assert result.adjustments == -3
        assert explanation == [
            "FSH 10 초과 → -1년",
            "FSH 15 초과 → 추가 -1년",
            "FSH 20 초과 → 추가 -1년",
        ]

    def test_fsh_threshold_is_strict(self):
        result, _ = calculate_prediction(_snap("45", "1.0", "15"))
        assert result.adjustments == -1

    def test_flags(self):
        result, explanation = calculate_prediction(
            _snap("45", "1.0", "5", family="Yes", autoimmune="Yes", chemo="Yes")
        )
        assert result.adjustments == -7
        assert explanation == [
            "조기폐경 가족력 있음 → -2년",
            "자가면역질환 있음 → -2년",
            "항암치료력 있음 → -3년",
        ]

    def test_flag_must_be_exact_yes(self):
        result, _ = calculate_prediction(_snap("45", "1.0", "5", family="yes"))
        assert result.adjustments == 0

    def test_everything_fires_in_order(self):
        result, explanation = calculate_prediction(
            _snap("30", "0.1", "30", family="Yes", autoimmune="Yes", chemo="Yes")
        )
        assert result.adjustments == sum(rule.years for rule in RULES) == -14
        assert explanation == [rule.reason for rule in RULES]
        assert result.expected_menopause_age == 37

    def test_worked_example_older_patient(self):
        result, explanation = calculate_prediction(
            _snap("45", "0.3", "12", family="Yes")
        )
        assert result.adjustments == -5
        assert result.expected_menopause_age == 46
        assert result.years_remaining == 1
        assert result.risk_level == "✅ 정상 범위"
        assert explanation == [
            "AMH 0.5 미만 → -2년",
            "FSH 10 초과 → -1년",
            "조기폐경 가족력 있음 → -2년",
        ]

    def test_worked_example_young_patient(self):
        result, explanation = calculate_prediction(_snap("35", "0.15", "8"))
        assert result.adjustments == -4
        assert result.expected_menopause_age == 47
        assert result.years_remaining == 12
        assert result.risk_level == "🚨 조기폐경 매우 높음"
        assert result.risk_color == "red"
        assert len(explanation) == 2


class TestYearsRemaining:

    @pytest.mark.parametrize("digits", [400, 5000])
    def test_huge_age_floors_at_zero(self, digits):
        result, _ = calculate_prediction(_snap("1" * digits, "0.1", "5"))
        assert result.current_age == math.inf
        assert result.years_remaining == 0
        assert result.risk_color == "green"

    def test_floor_at_zero(self):
        result, _ = calculate_prediction(_snap("60", "1.0", "5"))
        assert result.years_remaining == 0

    def test_exactly_at_expected_age(self):
        result, _ = calculate_prediction(_snap("51", "1.0", "5"))
        assert result.years_remaining == 0

    def test_nan_age_propagates(self):
        result, _ = calculate_prediction(_snap("", "1.0", "5"))
        assert math.isnan(result.current_age)
        assert math.isnan(result.years_remaining)
        assert result.expected_menopause_age == 51

    def test_all_blank_is_total(self):
        result, explanation = calculate_prediction(_snap())
        assert result.adjustments == 0
        assert explanation == []
        assert result.risk_color == "green"


class TestRiskClassification:

    def test_highest_at_boundary(self):
        assert classify_risk(35, 0.2) == cfg.RISK_HIGHEST

    def test_elevated_just_above_highest(self):
        assert classify_risk(35, 0.21) == cfg.RISK_ELEVATED

    def test_elevated_at_boundary(self):
        assert classify_risk(35, 0.5) == cfg.RISK_ELEVATED

    def test_normal_above_elevated(self):
        assert classify_risk(35, 0.51) == cfg.RISK_NORMAL

    def test_age_40_is_normal(self):
        assert classify_risk(40, 0.1) == cfg.RISK_NORMAL

    def test_age_39_low_amh(self):
        assert classify_risk(39, 0.1) == cfg.RISK_HIGHEST

    @pytest.mark.parametrize("age,amh", [
        (float("nan"), 0.1),
        (35, float("nan")),
        (float("nan"), float("nan")),
    ])
    def test_nan_falls_to_normal(self, age, amh):
        assert classify_risk(age, amh) == cfg.RISK_NORMAL

    def test_ignores_adjusted_age(self):
        result, _ = calculate_prediction(
            _snap("45", "0.1", "30", family="Yes", autoimmune="Yes", chemo="Yes")
        )
        assert result.expected_menopause_age == 37
        assert result.risk_color == "green"


class TestAdjustmentGrid:

    def test_shape_is_fsh_by_amh(self):
        grid = adjustment_grid([0.1, 0.3, 0.8], [5, 25])
        assert grid.shape == (2, 3)

    def test_matches_engine(self):
        amh_vals = [0.1, 0.2, 0.3, 0.5, 1.0]
        fsh_vals = [5, 10, 12, 16, 21]
        grid = adjustment_grid(amh_vals, fsh_vals)
        for i, fsh in enumerate(fsh_vals):
            for j, amh in enumerate(amh_vals):
                snap = InputSnapshot(current_age=30, amh=amh, fsh=fsh)
                result, _ = calculate_prediction(snap)
                assert grid[i, j] == result.expected_menopause_age

    def test_flag_adjustment_matches_rule_table(self):
        snap = _snap(family="Yes", autoimmune="Yes", chemo="Yes")
        expected = sum(rule.years for rule in RULES if rule.risk_factor)
        assert flag_adjustment(snap) == expected == -7
        assert flag_adjustment(_snap("30", "0.1", "30")) == 0

    def test_flag_years_shift_uniformly(self):
        snap = _snap(family="Yes", chemo="Yes")
        base = adjustment_grid([1.0], [5])
        shifted = adjustment_grid([1.0], [5], flag_adjustment(snap))
        assert shifted[0, 0] == base[0, 0] - 5

    def test_nan_cells_take_no_penalty(self):
        grid = adjustment_grid([np.nan], [np.nan])
        assert grid[0, 0] == 51
