"""
Flask web application for the loan prepayment vs invest simulator.

Single-file app using render_template_string.  Run via ``python main.py``
which starts the dev server on localhost:5000.  The form re-submits
itself shortly after any field changes, so the results always match
the inputs on screen.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any, Dict, Mapping, Tuple
from urllib.parse import urlencode

from flask import Flask, jsonify, render_template_string, request, send_file

import config as cfg
from simulation import (
    TABLE_COLUMNS,
    Configuration,
    SimulationResult,
    parse_config,
    prepayment_table,
    run_simulation,
)
from cli import (
    compute_display_data,
    generate_verdict_text,
    fmt,
    pct,
)
import report

logger = logging.getLogger(__name__)

app = Flask(__name__)

# ═══════════════════════════════════════════════════════════════════
# Form parsing
# ═══════════════════════════════════════════════════════════════════

def merge_form(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Known fields from ``values`` on top of the defaults."""
    form = dict(cfg.DEFAULT_FORM)
    for key in cfg.DEFAULT_FORM:
        if key in values:
            form[key] = values[key]
    return form


def parse_form(form: Mapping[str, Any]) -> Configuration:
    """Parse the HTML form into a Configuration. Blank fields count as 0."""
    return parse_config({key: form.get(key, "") for key in cfg.DEFAULT_FORM})


def _simulate(form: Mapping[str, Any]) -> Tuple[Configuration, SimulationResult, Dict[str, Any]]:
    config = parse_form(form)
    result = run_simulation(config)
    d = compute_display_data(config, result, prepayment_table(config))
    return config, result, d


# ═══════════════════════════════════════════════════════════════════
# HTML Template
# ═══════════════════════════════════════════════════════════════════

HTML_TEMPLATE = r"""
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Loan Prepayment vs Invest</title>
<style>
  *{margin:0;padding:0;box-sizing:border-box}
  :root{
    --bg-deep:#050816;
    --bg-surface:rgba(15,23,42,0.55);
    --bg-input:rgba(8,11,22,0.85);
    --border-subtle:rgba(99,102,241,0.1);
    --text-primary:#f1f5f9;
    --text-secondary:#94a3b8;
    --text-muted:#64748b;
    --indigo:#818cf8;
    --emerald:#34d399;
    --amber:#fbbf24;
    --red:#f87171;
    --radius-lg:16px;
    --radius-md:10px;
  }
  body{
    background:var(--bg-deep);color:var(--text-primary);
    font-family:system-ui,-apple-system,sans-serif;line-height:1.5;
  }
  .container{max-width:1240px;margin:0 auto;padding:2rem 1.5rem}
  h1{font-size:1.9rem;font-weight:800;letter-spacing:-.03em;margin-bottom:1.5rem}
  h2{font-size:1.05rem;font-weight:700;margin-bottom:1rem}
  .card{
    background:var(--bg-surface);border:1px solid var(--border-subtle);
    border-radius:var(--radius-lg);padding:1.5rem;margin-bottom:1.4rem;
  }
  .form-grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(210px,1fr));gap:1rem 1.4rem}
  .form-group{display:flex;flex-direction:column}
  .form-group label{font-size:.78rem;color:var(--text-secondary);margin-bottom:.3rem;font-weight:500}
  .form-group input{
    background:var(--bg-input);border:1px solid rgba(71,85,105,.35);
    border-radius:var(--radius-md);color:var(--text-primary);
    padding:.55rem .8rem;font-size:.88rem;font-family:inherit;
  }
  .form-group input[readonly]{color:var(--text-secondary)}
  .form-group.max input{border-color:rgba(52,211,153,.45)}
  .form-group.result input{border-color:rgba(129,140,248,.55)}
  .delta-neg{color:var(--emerald)}
  .delta-pos{color:var(--red)}
  .error{
    background:rgba(248,113,113,.08);border:1px solid rgba(248,113,113,.3);
    color:var(--red);border-radius:var(--radius-md);padding:.8rem 1rem;margin-bottom:1rem;
  }
  .verdict-winner{font-size:1.4rem;font-weight:800;margin-bottom:.3rem}
  .tag-prepay{color:var(--indigo)}
  .tag-invest{color:var(--emerald)}
  .tag-none{color:var(--text-secondary)}
  .verdict-text{color:var(--text-secondary);font-size:.9rem}
  .charts-row{display:grid;grid-template-columns:repeat(auto-fit,minmax(480px,1fr));gap:1.4rem}
  .chart-img{width:100%;border-radius:var(--radius-md)}
  .table-wrap{overflow-x:auto}
  table{width:100%;border-collapse:collapse;font-size:.8rem;font-variant-numeric:tabular-nums}
  th{color:var(--text-secondary);font-weight:600;text-align:right;padding:.4rem .6rem;border-bottom:1px solid rgba(51,65,85,.6)}
  td{text-align:right;padding:.3rem .6rem;border-bottom:1px solid rgba(51,65,85,.25)}
  th.border,td.border{border-right:1px solid rgba(51,65,85,.6)}
  tr.closed td{color:var(--amber)}
  tr.best td{background:rgba(251,191,36,.08);font-weight:600}
  .btn{
    display:inline-block;padding:.6rem 1.2rem;border-radius:var(--radius-md);
    background:rgba(16,185,129,.15);color:var(--emerald);text-decoration:none;font-weight:600;
  }
  .footer{text-align:center;color:var(--text-muted);font-size:.75rem;margin-top:2rem}
</style>
</head>
<body>
<div class="container">
<h1>Loan Prepayment vs Invest</h1>

<div class="card">
  <form method="POST" action="/" id="sim-form">
    {% if error %}<div class="error">{{ error }}</div>{% endif %}
    <div class="form-grid">
      <div class="form-group">
        <label>Loan amount</label>
        <input type="number" step="any" min="0" name="loan_total" value="{{ form.loan_total }}">
      </div>
      <div class="form-group">
        <label>Loan duration (months)</label>
        <input type="number" min="1" name="loan_duration" value="{{ form.loan_duration }}">
      </div>
      <div class="form-group">
        <label>Annual loan interest (%)</label>
        <input type="number" step="any" min="0" name="loan_interest" value="{{ form.loan_interest }}">
      </div>
      <div class="form-group">
        <label>Annual investment return (%)</label>
        <input type="number" step="any" min="0" name="invest_interest" value="{{ form.invest_interest }}">
      </div>
      <div class="form-group">
        <label>Available each month</label>
        <input type="number" step="any" min="0" name="monthly_available" value="{{ form.monthly_available }}">
      </div>
      <div class="form-group">
        <label>Months to simulate</label>
        <input type="number" min="0" name="measure_duration" value="{{ form.measure_duration }}"
               placeholder="{{ form.loan_duration }}">
      </div>
      <div class="form-group">
        <label>Months of extra payments</label>
        <input type="number" min="0" name="prefer_loan_duration" value="{{ form.prefer_loan_duration }}">
      </div>
    </div>

    {% if d %}
    <div class="form-grid" style="margin-top:1.2rem">
      <div class="form-group">
        <label>Monthly installment</label>
        <input type="text" value="{{ fmt(d.loan_monthly) }}" readonly>
      </div>
      <div class="form-group">
        <label>Total without extra payments</label>
        <input type="text" value="{{ fmt(d.total_loan_expected) }}" readonly>
      </div>
      <div class="form-group">
        <label>Total with extra payments
          {% if d.loan_saved_pct < 0 %}<span class="delta-neg">({{ pct(d.loan_saved_pct) }})</span>{% endif %}
        </label>
        <input type="text" value="{{ fmt(d.total_loan_paid) }}" readonly>
      </div>
      <div class="form-group max">
        <label>Fund without extra payments</label>
        <input type="text" value="{{ fmt(d.invest_max) }}" readonly>
      </div>
      <div class="form-group result">
        <label>Fund with extra payments
          {% if d.invest_pct > 0.01 or d.invest_pct < -0.01 %}
          <span class="{{ 'delta-neg' if d.invest_pct > 0 else 'delta-pos' }}">({{ pct(d.invest_pct) }})</span>
          {% endif %}
        </label>
        <input type="text" value="{{ fmt(d.invest_result) }}" readonly>
      </div>
    </div>
    {% endif %}
    <noscript><div style="margin-top:1rem"><button type="submit" class="btn">Recalculate</button></div></noscript>
  </form>
</div>

{% if d %}
<div class="card">
  <h2>The Verdict</h2>
  <div class="verdict-winner tag-{{ d.winner }}">
    {{ {"prepay": "PREPAYING WINS", "invest": "INVESTING WINS", "none": "NO EXTRA PAYMENTS"}[d.winner] }}
    {% if d.winner != "none" %}<span style="font-size:.95rem;font-weight:500"> by {{ fmt(d.adv_abs) }}</span>{% endif %}
  </div>
  <p class="verdict-text">{{ verdict_text }}</p>
</div>

<div class="charts-row">
  {% for img in charts[:2] %}
  <div class="card"><img class="chart-img" src="data:image/png;base64,{{ img }}" alt="chart"></div>
  {% endfor %}
</div>

<div class="card">
  <h2>How Long Should You Prepay?</h2>
  <div class="table-wrap">
    <table>
      <thead><tr>
        <th>Months of extra payments</th><th>Loan closes</th><th>Loan paid</th>
        <th>Saved on loan</th><th>Final fund</th><th>vs no extra payments</th>
      </tr></thead>
      <tbody>
      {% for r in d.prepayment.rows %}
        <tr class="{{ 'best' if r.prefer_loan_duration == d.best_level }}">
          <td>{{ r.prefer_loan_duration }}</td>
          <td>{{ r.payoff_month if r.payoff_month is not none else "-" }}</td>
          <td>{{ fmt(r.total_loan_paid) }}</td>
          <td>{{ fmt(r.interest_saved) }}</td>
          <td>{{ fmt(r.invest_result) }}</td>
          <td>{{ fmt(r.advantage) }}</td>
        </tr>
      {% endfor %}
      </tbody>
    </table>
  </div>
  {% if charts|length > 2 %}
  <img class="chart-img" style="margin-top:1rem" src="data:image/png;base64,{{ charts[2] }}" alt="Prepayment comparison">
  {% endif %}
</div>

<div class="card">
  <h2>Loan vs Investment Fund</h2>
  <div class="table-wrap">
    <table>
      <thead>
        <tr>
          <th colspan="2" class="border"></th>
          <th colspan="6" class="border" style="text-align:center">Loan</th>
          <th colspan="3" style="text-align:center">Investment fund</th>
        </tr>
        <tr>
          {% for col in columns %}
          <th class="{{ 'border' if loop.index in (2, 8) }}">{{ col }}</th>
          {% endfor %}
        </tr>
      </thead>
      <tbody>
      {% for rec in result.monthly_data %}
        <tr class="{{ 'closed' if not rec.loan_active }}">
          {% for cell in rec.as_row() %}
          <td class="{{ 'border' if loop.index in (2, 8) }}">{{ cell if loop.index in (1, 7) else "%.2f"|format(cell) }}</td>
          {% endfor %}
        </tr>
      {% endfor %}
      </tbody>
    </table>
  </div>
</div>

<div style="text-align:center">
  <a href="/download-pdf?{{ query }}" class="btn">Download PDF Report</a>
</div>
{% endif %}

<div class="footer">Constant rates, monthly compounding. Not financial advice.</div>
</div>

<script>
(function(){
  var form=document.getElementById('sim-form');
  var timer=null;
  form.addEventListener('input',function(){
    clearTimeout(timer);
    timer=setTimeout(function(){form.submit()},600);
  });
})();
</script>
</body>
</html>
"""


def _render(form: Dict[str, Any], status: int = 200):
    try:
        config, result, d = _simulate(form)
    except ValueError as exc:
        logger.warning("Rejected input: %s", exc)
        return render_template_string(
            HTML_TEMPLATE, form=form, d=None, error=str(exc),
            fmt=fmt, pct=pct,
        ), 400

    return render_template_string(
        HTML_TEMPLATE,
        form=form,
        d=d,
        error=None,
        result=result,
        columns=TABLE_COLUMNS,
        charts=report.get_web_charts(config, result, d),
        verdict_text=generate_verdict_text(d),
        query=urlencode(form),
        fmt=fmt,
        pct=pct,
    ), status


# ═══════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════

@app.route("/", methods=["GET", "POST"])
def index():
    if request.method == "GET":
        return _render(merge_form(request.args))

    form = merge_form(request.form.to_dict())
    logger.info("Simulating %s", form)
    return _render(form)


@app.route("/api/schedule", methods=["GET", "POST"])
def api_schedule():
    """JSON version of the results page."""
    if request.method == "POST":
        values = request.get_json(silent=True) or {}
    else:
        values = request.args
    form = merge_form(values)
    try:
        config = parse_form(form)
    except ValueError as exc:
        logger.warning("Rejected input: %s", exc)
        return jsonify({"error": str(exc)}), 400

    result = run_simulation(config)
    table = prepayment_table(config)
    payload = result.to_dict()
    payload["prepayment"] = {
        "best_level": table.best_level,
        "rows": [dataclasses.asdict(r) for r in table.rows],
    }
    return jsonify(payload)


@app.route("/download-pdf")
def download_pdf():
    form = merge_form(request.args)
    try:
        config, result, d = _simulate(form)
    except ValueError as exc:
        logger.warning("Rejected input: %s", exc)
        return f"Invalid input: {exc}", 400

    path = report.generate_pdf(config, result, d, generate_verdict_text(d),
                               os.path.abspath(cfg.PDF_PATH))
    return send_file(path, as_attachment=True, download_name=os.path.basename(cfg.PDF_PATH))


# ═══════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════

def run_web(debug: bool = True, port: int = cfg.WEB_PORT) -> None:
    """Start the Flask development server and open browser."""
    import webbrowser
    import threading

    url = f"http://localhost:{port}"
    print(f"Starting web app at {url}")
    threading.Timer(1.0, lambda: webbrowser.open(url)).start()
    app.run(host=cfg.WEB_HOST, port=port, debug=debug)


if __name__ == "__main__":
    run_web()
