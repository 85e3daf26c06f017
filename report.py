"""
PDF report generation and reusable chart rendering for the
menopause age estimator.

Provides:
  - Base64-encoded chart images for web embedding (get_web_charts)
  - A three-page PDF built in memory (generate_pdf)

Chart text is English only: the default matplotlib fonts carry no Hangul.
"""

from __future__ import annotations

import base64
import io
import logging
import math
from typing import List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
import numpy as np

import config as cfg
from form_state import FormState, compute, snapshot
from prediction import InputSnapshot, adjustment_grid, flag_adjustment, triggered_rules

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════
# Style constants
# ═══════════════════════════════════════════════════════════════════

BG = "#ffffff"
CARD = "#f8fafc"
TEXT = "#0f172a"
TEXT2 = "#475569"
BLUE = "#2563eb"
GREEN = "#16a34a"
YELLOW = "#eab308"
RED = "#dc2626"
SLATE = "#94a3b8"
BORDER = "#e2e8f0"

RISK_COLORS = {"red": RED, "yellow": YELLOW, "green": GREEN}
RISK_NAMES = {
    "red": "Very high risk of early menopause",
    "yellow": "Some risk of early menopause",
    "green": "Normal range",
}

RULE_LABELS = {
    "amh_low": "AMH < 0.5",
    "amh_very_low": "AMH < 0.2 (extra)",
    "fsh_mild": "FSH > 10",
    "fsh_high": "FSH > 15 (extra)",
    "fsh_very_high": "FSH > 20 (extra)",
    "family_history": "Family history",
    "autoimmune": "Autoimmune disease",
    "chemo": "Chemotherapy",
}

A4W, A4H = 8.27, 11.69
WEB_W, WEB_H = 9, 5


def _style(fig, *axes):
    """Apply the light card theme to figure and all axes."""
    fig.patch.set_facecolor(BG)
    for ax in axes:
        ax.set_facecolor(CARD)
        ax.tick_params(colors=TEXT, labelsize=8)
        ax.xaxis.label.set_color(TEXT)
        ax.yaxis.label.set_color(TEXT)
        ax.title.set_color(TEXT)
        for spine in ax.spines.values():
            spine.set_color(BORDER)


def _fmt(val: float) -> str:
    if math.isnan(val):
        return "NaN"
    if math.isinf(val):
        return "Infinity" if val > 0 else "-Infinity"
    return f"{val:.0f}"


# ═══════════════════════════════════════════════════════════════════
# Charts
# ═══════════════════════════════════════════════════════════════════

def adjustment_chart(snap: InputSnapshot, figsize=(WEB_W, WEB_H)) -> plt.Figure:
    """Waterfall from the base age down through every triggered rule."""
    fired = triggered_rules(snap)
    labels = ["Base age"]
    lefts = [0]
    widths = [cfg.BASE_MENOPAUSE_AGE]
    colors = [SLATE]

    running = cfg.BASE_MENOPAUSE_AGE
    for rule in fired:
        labels.append(f"{RULE_LABELS[rule.rule_id]}  ({rule.years:+d})")
        lefts.append(running + rule.years)
        widths.append(-rule.years)
        colors.append(RED)
        running += rule.years

    labels.append("Expected age")
    lefts.append(0)
    widths.append(running)
    colors.append(BLUE)

    fig, ax = plt.subplots(figsize=figsize)
    _style(fig, ax)
    y = np.arange(len(labels))[::-1]
    ax.barh(y, widths, left=lefts, color=colors, height=0.6)
    ax.set_yticks(y)
    ax.set_yticklabels(labels)
    ax.set_xlim(min(running, cfg.BASE_MENOPAUSE_AGE) - 8, cfg.BASE_MENOPAUSE_AGE + 2)
    ax.set_xlabel("Age (years)")
    ax.axvline(cfg.BASE_MENOPAUSE_AGE, color=SLATE, linestyle="--", linewidth=1)
    ax.text(running, y[-1], f"  {running}", va="center", color=TEXT,
            fontsize=9, fontweight="bold")
    ax.set_title("How the estimate was adjusted", fontsize=11, fontweight="bold")
    ax.grid(True, axis="x", alpha=0.25, color=SLATE)
    fig.tight_layout()
    return fig


def sensitivity_chart(snap: InputSnapshot, figsize=(WEB_W, WEB_H + 1)) -> plt.Figure:
    """Expected age across AMH x FSH with the user's risk factors fixed."""
    amh_vals = np.linspace(0.0, cfg.GRID_AMH_MAX, cfg.GRID_STEPS)
    fsh_vals = np.linspace(0.0, cfg.GRID_FSH_MAX, cfg.GRID_STEPS)
    grid = adjustment_grid(amh_vals, fsh_vals, flag_adjustment(snap))

    fig, ax = plt.subplots(figsize=figsize)
    _style(fig, ax)
    im = ax.imshow(
        grid,
        origin="lower",
        aspect="auto",
        cmap="RdYlGn",
        extent=(amh_vals[0], amh_vals[-1], fsh_vals[0], fsh_vals[-1]),
        vmin=grid.min() - 1,
        vmax=cfg.BASE_MENOPAUSE_AGE,
    )
    cbar = fig.colorbar(im, ax=ax)
    cbar.set_label("Expected menopause age", color=TEXT)

    if np.isfinite(snap.amh) and np.isfinite(snap.fsh):
        ax.scatter(
            [min(max(snap.amh, 0.0), cfg.GRID_AMH_MAX)],
            [min(max(snap.fsh, 0.0), cfg.GRID_FSH_MAX)],
            s=90, color=BLUE, edgecolor="white", linewidth=1.5, zorder=3,
            label="Your values",
        )
        ax.legend(loc="upper right", fontsize=8, facecolor=CARD, edgecolor=BORDER)

    ax.set_xlabel("AMH (ng/mL)")
    ax.set_ylabel("FSH (IU/L)")
    ax.set_title("Expected age by hormone levels", fontsize=11, fontweight="bold")
    fig.tight_layout()
    return fig


def _summary_page(state: FormState) -> plt.Figure:
    r = state.result
    snap = snapshot(state)
    fig = plt.figure(figsize=(A4W, A4H))
    fig.patch.set_facecolor(BG)

    y = 0.92
    fig.text(0.08, y, "Menopause Age Estimate", fontsize=20,
             fontweight="bold", color=TEXT)
    y -= 0.05
    fig.text(0.08, y, RISK_NAMES[r.risk_color], fontsize=14,
             fontweight="bold", color=RISK_COLORS[r.risk_color])

    rows = [
        ("Current age", _fmt(r.current_age)),
        ("AMH (ng/mL)", state.inputs["amh"] or "-"),
        ("FSH (IU/L)", state.inputs["fsh"] or "-"),
        ("Family history of early menopause", snap.family_history),
        ("Autoimmune disease", snap.autoimmune),
        ("Chemotherapy history", snap.chemo),
        ("Total adjustment (years)", f"{r.adjustments:d}"),
        ("Expected menopause age", _fmt(r.expected_menopause_age)),
        ("Years remaining (approx.)", _fmt(r.years_remaining)),
    ]
    y -= 0.07
    for label, value in rows:
        fig.text(0.08, y, label, fontsize=11, color=TEXT2)
        fig.text(0.70, y, value, fontsize=11, color=TEXT, fontweight="bold")
        y -= 0.035

    fired = triggered_rules(snap)
    if fired:
        y -= 0.02
        fig.text(0.08, y, "Calculation basis", fontsize=12,
                 fontweight="bold", color=TEXT)
        for rule in fired:
            y -= 0.03
            fig.text(0.10, y, f"- {RULE_LABELS[rule.rule_id]}: {rule.years:+d} years",
                     fontsize=10, color=TEXT2)

    fig.text(0.08, 0.08,
             "For counselling and planning reference only. This does not replace\n"
             "medical diagnosis; please consult a clinician.",
             fontsize=8, color=SLATE)
    return fig


# ═══════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════

def figure_to_base64(fig: plt.Figure) -> str:
    """Convert a matplotlib figure to a base64-encoded PNG string."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", facecolor=fig.get_facecolor(),
                dpi=120, bbox_inches="tight")
    buf.seek(0)
    b64 = base64.b64encode(buf.read()).decode()
    buf.close()
    return b64


def get_web_charts(state: FormState) -> List[str]:
    """Return base64-encoded PNG chart images for web embedding.

    Returns 2 charts:
      [0] Adjustment waterfall
      [1] AMH/FSH sensitivity heatmap
    """
    snap = snapshot(state)
    chart_figs = [adjustment_chart(snap), sensitivity_chart(snap)]
    try:
        return [figure_to_base64(f) for f in chart_figs]
    finally:
        for f in chart_figs:
            plt.close(f)


def generate_pdf(state: FormState) -> bytes:
    """Render summary page plus both charts into PDF bytes."""
    if state.result is None:
        state = compute(state)
    snap = snapshot(state)
    pages = [
        _summary_page(state),
        adjustment_chart(snap, figsize=(A4W, A4H * 0.5)),
        sensitivity_chart(snap, figsize=(A4W, A4H * 0.55)),
    ]

    buf = io.BytesIO()
    try:
        with PdfPages(buf) as pdf:
            for fig in pages:
                pdf.savefig(fig, facecolor=fig.get_facecolor())
    finally:
        for fig in pages:
            plt.close(fig)
    logger.debug("PDF report rendered (%d bytes)", buf.getbuffer().nbytes)
    return buf.getvalue()
