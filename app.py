"""
Flask web application for the menopause age estimator.

Single-file app using render_template_string.  Run via ``python main.py``
which starts the dev server (default localhost:5000).

The server keeps no per-user state.  Every click posts the whole form
and the request replays it through the form-state reducer: first the
typed fields, then the clicked action (compute, reset or a Yes/No
toggle).  The inputs used for the last compute travel along as
``last_*`` hidden fields so a result stays on screen after later edits,
exactly as computed.
"""

from __future__ import annotations

import io
import logging
from dataclasses import replace
from typing import Dict, Mapping

from flask import Flask, abort, render_template_string, request, send_file

import config as cfg
from cli import compute_display_data
from form_state import (
    FormState,
    compute,
    initial_state,
    reset_form,
    select_option,
    set_field,
)
import report

logger = logging.getLogger(__name__)

app = Flask(__name__)

# ═══════════════════════════════════════════════════════════════════
# Form replay
# ═══════════════════════════════════════════════════════════════════

def state_from_form(form: Mapping[str, str]) -> FormState:
    """Apply each posted field as if it had been typed or clicked."""
    state = initial_state()
    for name in cfg.DEFAULT_INPUTS:
        if name in form:
            state = set_field(state, name, form[name])
    return state


def _last_inputs(form: Mapping[str, str]) -> Dict[str, str] | None:
    if f"last_{cfg.NUMERIC_FIELDS[0]}" not in form:
        return None
    return {
        name: form.get(f"last_{name}", default)
        for name, default in cfg.DEFAULT_INPUTS.items()
    }


def _restore_result(state: FormState, last: Dict[str, str] | None) -> FormState:
    """Recreate the previously shown result from the inputs it was computed on."""
    if last is None:
        return state
    previous = compute(replace(state, inputs=last))
    return replace(state, result=previous.result, explanation=previous.explanation)


def apply_action(state: FormState, action: str) -> FormState:
    """Dispatch one user action.  Raises ValueError for anything unknown."""
    if action == "compute":
        return compute(state)
    if action == "reset":
        return reset_form(state)
    if action.startswith("select:"):
        parts = action.split(":")
        if len(parts) != 3 or parts[2] not in (cfg.YES, cfg.NO):
            raise ValueError(f"Malformed toggle action: {action!r}")
        return select_option(state, parts[1], parts[2])
    raise ValueError(f"Unknown action: {action!r}")


# ═══════════════════════════════════════════════════════════════════
# HTML Template
# ═══════════════════════════════════════════════════════════════════

HTML_TEMPLATE = r"""
<!DOCTYPE html>
<html lang="ko">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{{ cfg.TITLE }}</title>
<style>
  *{margin:0;padding:0;box-sizing:border-box}

  :root{
    --bg:#ffffff;
    --text:#0f172a;
    --text-muted:#64748b;
    --blue:#2563eb;
    --blue-deep:#1d4ed8;
    --gray:#6b7280;
    --gray-deep:#4b5563;
    --green-bg:#dcfce7;
    --radius-lg:16px;
    --radius-md:10px;
  }

  body{
    background:var(--bg);color:var(--text);
    font-family:system-ui,-apple-system,'Apple SD Gothic Neo','Malgun Gothic',sans-serif;
    line-height:1.6;min-height:100vh;
    display:flex;align-items:center;justify-content:center;padding:1.5rem;
  }

  .card{
    width:100%;max-width:36rem;background:var(--bg);
    border-radius:var(--radius-lg);box-shadow:0 4px 14px rgba(0,0,0,.08);
    padding:1.5rem;
  }
  .logo{display:flex;justify-content:center;margin-bottom:1.5rem}
  .logo img{width:180px;height:auto}
  h1{font-size:1.9rem;font-weight:700;text-align:center;margin-bottom:1.5rem}

  /* ── form ── */
  .fields{display:flex;flex-direction:column;align-items:center;gap:1rem}
  .form-group{width:100%;max-width:20rem}
  .form-group label{display:block;font-size:.875rem;font-weight:600;margin-bottom:.25rem}
  .form-group input{width:100%;border:1px solid #d1d5db;border-radius:.25rem;padding:.5rem;font-size:1rem}
  .toggle{display:flex;gap:.5rem}
  .toggle button{
    flex:1;padding:.5rem 1rem;border-radius:.5rem;border:1px solid #d1d5db;
    background:#f3f4f6;cursor:pointer;font-size:.95rem;
  }
  .toggle button.on{background:var(--blue);color:#fff;border-color:var(--blue)}

  /* ── buttons ── */
  .actions{margin-top:1.5rem;display:flex;justify-content:center;gap:1rem}
  .btn{border:none;border-radius:.5rem;padding:.5rem 1.5rem;color:#fff;font-size:1rem;cursor:pointer}
  .btn-primary{background:var(--blue)}
  .btn-primary:hover{background:var(--blue-deep)}
  .btn-secondary{background:var(--gray)}
  .btn-secondary:hover{background:var(--gray-deep)}

  /* ── result ── */
  .result{
    margin-top:2rem;padding:1.5rem;background:var(--green-bg);
    border-radius:var(--radius-lg);box-shadow:0 4px 14px rgba(0,0,0,.1);text-align:center;
  }
  .result p{font-size:1.1rem;margin-bottom:.5rem}
  .risk{font-weight:600}
  .risk-red{color:#dc2626}
  .risk-yellow{color:#eab308}
  .risk-green{color:#16a34a}
  .expected{font-size:1.5rem !important;font-weight:700}
  .basis{text-align:left;background:#fff;padding:1rem;border-radius:.75rem;border:1px solid #e5e7eb;margin-top:1rem}
  .basis ul{margin-left:1.25rem;font-size:.875rem}
  .chart-img{width:100%;border-radius:var(--radius-md);margin-top:1rem;background:#fff}
  .disclaimer{font-size:.75rem;color:var(--text-muted);margin-top:1.5rem}
  .disclaimer a{color:#3b82f6;text-decoration:underline;display:block;margin-top:.5rem}
  .dl{margin-top:1rem}
</style>
</head>
<body>
<div class="card">
  {% if cfg.LOGO_URL %}
  <div class="logo"><img src="{{ cfg.LOGO_URL }}" alt="logo"></div>
  {% endif %}
  <h1>{{ cfg.TITLE }}</h1>

  <form method="POST" action="/" id="predict-form">
    <!-- Enter in a text field submits the first button: keep it "compute" -->
    <button type="submit" name="action" value="compute" style="display:none" tabindex="-1"></button>
    <div class="fields">
      {% for name in cfg.NUMERIC_FIELDS %}
      <div class="form-group">
        <label for="{{ name }}">{{ cfg.FIELD_LABELS[name] }}</label>
        <input type="text" id="{{ name }}" name="{{ name }}" value="{{ state.inputs[name] }}">
      </div>
      {% endfor %}
      {% for name in cfg.TOGGLE_FIELDS %}
      <div class="form-group">
        <label>{{ cfg.FIELD_LABELS[name] }}</label>
        <input type="hidden" name="{{ name }}" value="{{ state.inputs[name] }}">
        <div class="toggle">
          {% for val in (cfg.YES, cfg.NO) %}
          <button type="submit" name="action" value="select:{{ name }}:{{ val }}"
                  class="{{ 'on' if state.inputs[name] == val }}">{{ val }}</button>
          {% endfor %}
        </div>
      </div>
      {% endfor %}
    </div>
    {% if last %}
      {% for name, value in last.items() %}
      <input type="hidden" name="last_{{ name }}" value="{{ value }}">
      {% endfor %}
    {% endif %}
    <div class="actions">
      <button type="submit" name="action" value="compute" class="btn btn-primary">결과 계산</button>
      <button type="submit" name="action" value="reset" class="btn btn-secondary">초기화</button>
    </div>
  </form>

  {% if d %}
  <div class="result">
    <p class="risk risk-{{ d.risk_color }}">{{ d.risk_level }}</p>
    <p>{{ d.lines[0] }}</p>
    <p>{{ d.lines[1] }}</p>
    <p class="expected">{{ d.lines[2] }}</p>
    <p>{{ d.lines[3] }}</p>

    {% if d.explanation %}
    <div class="basis">
      <p><strong>🧾 계산 근거:</strong></p>
      <ul>
        {% for item in d.explanation %}
        <li>{{ item }}</li>
        {% endfor %}
      </ul>
    </div>
    {% endif %}

    {% for chart in charts %}
    <img class="chart-img" src="data:image/png;base64,{{ chart }}" alt="chart {{ loop.index }}">
    {% endfor %}

    <form method="POST" action="/report.pdf" class="dl">
      {% for name, value in last.items() %}
      <input type="hidden" name="{{ name }}" value="{{ value }}">
      {% endfor %}
      <button type="submit" class="btn btn-primary">PDF 저장</button>
    </form>

    <div class="disclaimer">
      {% for line in cfg.DISCLAIMER %}{{ line }}<br>{% endfor %}
      <a href="{{ cfg.BOOKING_URL }}" target="_blank" rel="noopener noreferrer">{{ cfg.BOOKING_LABEL }}</a>
    </div>
  </div>
  {% endif %}
</div>
</body>
</html>
"""


def _render(state: FormState, last: Dict[str, str] | None):
    d = compute_display_data(state)
    charts = report.get_web_charts(replace(state, inputs=last)) if d else []
    return render_template_string(
        HTML_TEMPLATE,
        cfg=cfg,
        state=state,
        last=last,
        d=d,
        charts=charts,
    )


# ═══════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════

@app.route("/", methods=["GET", "POST"])
def index():
    if request.method == "GET":
        return _render(initial_state(), None)

    form = request.form.to_dict()
    action = form.get("action", "compute")
    last = _last_inputs(form)
    try:
        state = _restore_result(state_from_form(form), last)
        state = apply_action(state, action)
    except ValueError as exc:
        logger.warning("Rejected form post: %s", exc)
        abort(400)

    if action == "compute":
        last = dict(state.inputs)
    elif state.result is None:
        last = None
    logger.debug("action=%s result=%s", action, state.result is not None)
    return _render(state, last)


@app.route("/report.pdf", methods=["POST"])
def download_pdf():
    state = compute(state_from_form(request.form.to_dict()))
    pdf = report.generate_pdf(state)
    return send_file(
        io.BytesIO(pdf),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=cfg.PDF_FILENAME,
    )


# ═══════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════

def run_web(debug: bool = cfg.DEBUG, open_browser: bool = True) -> None:
    """Start the Flask development server and open browser."""
    import webbrowser
    import threading

    url = f"http://{cfg.HOST}:{cfg.PORT}"
    logger.info("Starting web app at %s", url)
    if open_browser:
        threading.Timer(1.0, lambda: webbrowser.open(url)).start()
    app.run(host=cfg.HOST, port=cfg.PORT, debug=debug)


if __name__ == "__main__":
    run_web()
