"""
Constants for the menopause age estimator.

Scoring values follow the clinic's reference sheet: a population base age
of 51, lowered by fixed year penalties for low ovarian-reserve markers
and known risk factors.  Server settings come from the environment
(optionally via a ``.env`` file in the working directory).
"""

import os

from dotenv import load_dotenv

load_dotenv()

# ── Scoring ──────────────────────────────────────────────────────────
BASE_MENOPAUSE_AGE = 51   # population median, years

# AMH thresholds (ng/mL), strict less-than.  Penalties stack.
AMH_LOW = 0.5
AMH_VERY_LOW = 0.2
AMH_LOW_PENALTY = -2
AMH_VERY_LOW_PENALTY = -2

# FSH thresholds (IU/L), strict greater-than.  Penalties stack.
FSH_MILD = 10
FSH_HIGH = 15
FSH_VERY_HIGH = 20
FSH_PENALTY = -1          # applied once per threshold crossed

FAMILY_HISTORY_PENALTY = -2
AUTOIMMUNE_PENALTY = -2
CHEMO_PENALTY = -3

# ── Risk classification ──────────────────────────────────────────────
# Inclusive (<=) AMH bounds, only for women under RISK_AGE_LIMIT.
RISK_AGE_LIMIT = 40
RISK_AMH_HIGHEST = 0.2
RISK_AMH_ELEVATED = 0.5

RISK_HIGHEST = ("🚨 조기폐경 매우 높음", "red")
RISK_ELEVATED = ("⚠️ 조기폐경 위험 있음", "yellow")
RISK_NORMAL = ("✅ 정상 범위", "green")

# ── Explanation lines (one per rule, in evaluation order) ───────────
REASON_AMH_LOW = "AMH 0.5 미만 → -2년"
REASON_AMH_VERY_LOW = "AMH 0.2 미만 → 추가 -2년"
REASON_FSH_MILD = "FSH 10 초과 → -1년"
REASON_FSH_HIGH = "FSH 15 초과 → 추가 -1년"
REASON_FSH_VERY_HIGH = "FSH 20 초과 → 추가 -1년"
REASON_FAMILY_HISTORY = "조기폐경 가족력 있음 → -2년"
REASON_AUTOIMMUNE = "자가면역질환 있음 → -2년"
REASON_CHEMO = "항암치료력 있음 → -3년"

# ── Form ─────────────────────────────────────────────────────────────
YES = "Yes"
NO = "No"

NUMERIC_FIELDS = ("currentAge", "amh", "fsh")
TOGGLE_FIELDS = ("familyHistory", "autoimmune", "chemo")

DEFAULT_INPUTS = {
    "currentAge": "",
    "amh": "",
    "fsh": "",
    "familyHistory": NO,
    "autoimmune": NO,
    "chemo": NO,
}

FIELD_LABELS = {
    "currentAge": "현재 나이 (세)",
    "amh": "AMH 수치 (ng/mL)",
    "fsh": "FSH 수치 (IU/L)",
    "familyHistory": "조기폐경 가족력",
    "autoimmune": "자가면역질환 유무",
    "chemo": "항암치료력 유무",
}

TITLE = "폐경 예상 계산기"

DISCLAIMER = (
    "※ 본 결과는 개인 상담 및 건강 관리 방향 설정을 위한 참고 자료이며,",
    "실제 진단이나 의학적 결정을 대신하지 않습니다.",
    "정확한 진단과 치료는 의료진 상담을 통해 진행해 주세요.",
)
BOOKING_LABEL = "더 자세한 상담 예약하기"

# ── Sensitivity grid (report charts) ─────────────────────────────────
GRID_AMH_MAX = 1.0        # ng/mL
GRID_FSH_MAX = 30.0       # IU/L
GRID_STEPS = 61

# ── Server ───────────────────────────────────────────────────────────
HOST = os.getenv("MENOPAUSE_HOST", "127.0.0.1")
PORT = int(os.getenv("MENOPAUSE_PORT", "5000"))
DEBUG = os.getenv("MENOPAUSE_DEBUG", "false").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("MENOPAUSE_LOG_LEVEL", "INFO")
BOOKING_URL = os.getenv("MENOPAUSE_BOOKING_URL", "https://naver.me/xJiBlAUU")
LOGO_URL = os.getenv("MENOPAUSE_LOGO_URL", "")

PDF_FILENAME = "menopause_prediction.pdf"
