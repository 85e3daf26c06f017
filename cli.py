"""
CLI interface and shared display-data computation for the
menopause age estimator.
"""

from __future__ import annotations

import logging
import math
import sys
import unicodedata
from typing import Any, Dict, List, Optional

import config as cfg
from form_state import FormState, compute, initial_state, select_option, set_field
import report

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════

def fmt_age(val: float) -> str:
    """Whole years; NaN and overflowed values render as ``NaN``/``Infinity``."""
    if math.isnan(val):
        return "NaN"
    if math.isinf(val):
        return "Infinity" if val > 0 else "-Infinity"
    return f"{val:.0f}"


def fmt_adjustment(val: int) -> str:
    return f"{val:d}"


# ═══════════════════════════════════════════════════════════════════
# Shared display-data computation (used by CLI and web app)
# ═══════════════════════════════════════════════════════════════════

def compute_display_data(state: FormState) -> Optional[Dict[str, Any]]:
    """Flatten the current result into display strings, or None if unset."""
    r = state.result
    if r is None:
        return None
    return {
        "risk_level": r.risk_level,
        "risk_color": r.risk_color,
        "current_age": fmt_age(r.current_age),
        "adjustments": fmt_adjustment(r.adjustments),
        "expected_age": fmt_age(r.expected_menopause_age),
        "years_remaining": fmt_age(r.years_remaining),
        "explanation": list(state.explanation),
        "lines": [
            f"현재 나이: {fmt_age(r.current_age)}세",
            f"난소 기능 상태: {fmt_adjustment(r.adjustments)}년 조정",
            f"👉 예상 폐경 시기: {fmt_age(r.expected_menopause_age)}세 전후",
            f"(앞으로 약 {fmt_age(r.years_remaining)}년 이내 폐경 가능성)",
        ],
    }


# ═══════════════════════════════════════════════════════════════════
# Input collection (CLI)
# ═══════════════════════════════════════════════════════════════════

def _prompt_text(label: str) -> str:
    return input(f"  {label}: ")


def _prompt_choice(label: str, options: list[str], default: str) -> str:
    opts = "/".join(options)
    while True:
        raw = input(f"  {label} ({opts}) [{default}]: ").strip().lower()
        if not raw:
            return default
        if raw in options:
            return raw
        print(f"    Choose from: {opts}")


def collect_inputs(state: FormState) -> FormState:
    """Prompt for all six fields.  Numeric text is kept exactly as typed."""
    print("\n  값을 입력하세요 (예/아니오 항목은 Enter = No):\n")

    for name in cfg.NUMERIC_FIELDS:
        state = set_field(state, name, _prompt_text(cfg.FIELD_LABELS[name]))
    for name in cfg.TOGGLE_FIELDS:
        choice = _prompt_choice(cfg.FIELD_LABELS[name], ["yes", "no"], "no")
        state = select_option(state, name, cfg.YES if choice == "yes" else cfg.NO)
    return state


# ═══════════════════════════════════════════════════════════════════
# Box rendering
# ═══════════════════════════════════════════════════════════════════

W = 64  # box width (terminal columns)


def _width(text: str) -> int:
    """Terminal columns taken by ``text`` (Hangul and emoji are double)."""
    total = 0
    for ch in text:
        if unicodedata.combining(ch) or ch == "\ufe0f":
            continue
        total += 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
    return total


def _pad(text: str, width: int) -> str:
    return text + " " * max(0, width - _width(text))


def _box_top(title: str) -> str:
    bar = "═" * (W - 2)
    return (
        f"╔{bar}╗\n"
        f"║  {_pad(title, W - 4)}║\n"
        f"╠{bar}╣"
    )


def _box_line(text: str = "") -> str:
    return f"║  {_pad(text, W - 4)}║"


def _box_bottom() -> str:
    bar = "═" * (W - 2)
    return f"╚{bar}╝"


def _print_section(title: str, rows: List[str]) -> None:
    print(_box_top(title))
    for r in rows:
        print(r)
    print(_box_bottom())
    print()


# ═══════════════════════════════════════════════════════════════════
# CLI Section Printers
# ═══════════════════════════════════════════════════════════════════

def _print_result(d: Dict[str, Any]) -> None:
    rows = [_box_line(d["risk_level"]), _box_line()]
    rows.extend(_box_line(line) for line in d["lines"])
    _print_section("결과", rows)


def _print_explanation(d: Dict[str, Any]) -> None:
    if not d["explanation"]:
        return
    rows = [_box_line(f"- {reason}") for reason in d["explanation"]]
    _print_section("🧾 계산 근거", rows)


def _print_disclaimer() -> None:
    rows = [_box_line(line) for line in cfg.DISCLAIMER]
    rows.append(_box_line())
    rows.append(_box_line(f"{cfg.BOOKING_LABEL}: {cfg.BOOKING_URL}"))
    _print_section("안내", rows)


# ═══════════════════════════════════════════════════════════════════
# Main CLI entry point
# ═══════════════════════════════════════════════════════════════════

def run_cli() -> None:
    """Run the full CLI workflow."""
    # Ensure box-drawing characters and Hangul render on Windows
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except (AttributeError, OSError):
        pass
    print()
    print("=" * W)
    print(f"  {cfg.TITLE}")
    print("=" * W)

    state = collect_inputs(initial_state())
    state = compute(state)
    d = compute_display_data(state)

    print()
    _print_result(d)
    _print_explanation(d)
    _print_disclaimer()

    if _prompt_choice("PDF 보고서 저장", ["yes", "no"], "no") == "yes":
        path = input(f"  저장 경로 [{cfg.PDF_FILENAME}]: ").strip() or cfg.PDF_FILENAME
        pdf = report.generate_pdf(state)
        with open(path, "wb") as fh:
            fh.write(pdf)
        logger.info("PDF report written to %s", path)
        print(f"  Saved to {path}\n")


if __name__ == "__main__":
    run_cli()
