import pytest

import config as cfg
from app import app, merge_form


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def test_merge_form_keeps_defaults_and_ignores_unknown():
    form = merge_form({"loan_total": "5000", "bogus": "1"})
    assert form["loan_total"] == "5000"
    assert form["loan_duration"] == cfg.DEFAULT_FORM["loan_duration"]
    assert "bogus" not in form


def test_index_get(client, small_form):
    resp = client.get("/", query_string=small_form)
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert "PREPAYING WINS" in html
    assert "How Long Should You Prepay?" in html
    assert "data:image/png;base64," in html
    assert "/download-pdf?" in html


def test_index_post(client, small_form):
    resp = client.post("/", data=dict(small_form, prefer_loan_duration="0"))
    assert resp.status_code == 200
    assert "NO EXTRA PAYMENTS" in resp.get_data(as_text=True)


def test_index_rejects_bad_input(client, small_form):
    resp = client.post("/", data=dict(small_form, loan_duration="0"))
    assert resp.status_code == 400
    assert "Loan duration must be at least 1 month" in resp.get_data(as_text=True)


def test_api_get(client, small_form):
    resp = client.get("/api/schedule", query_string=small_form)
    assert resp.status_code == 200
    data = resp.get_json()
    assert len(data["monthly_data"]) == 18
    assert data["loan_monthly"] == pytest.approx(8606.64, abs=0.01)
    assert data["payoff_month"] == 7
    assert [r["prefer_loan_duration"] for r in data["prepayment"]["rows"]] == [0, 6, 12]


def test_api_post_json(client):
    resp = client.post("/api/schedule", json={
        "loan_total": 100_000, "loan_interest": 6, "loan_duration": 12,
        "monthly_available": 10_000,
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert len(data["monthly_data"]) == 12
    assert data["monthly_data"][-1]["loan_new_total"] == 0.0


def test_api_rejects_bad_input(client, small_form):
    resp = client.get("/api/schedule", query_string=dict(small_form, loan_total="lots"))
    assert resp.status_code == 400
    assert "loan_total" in resp.get_json()["error"]


def test_download_pdf(client, small_form, tmp_path, monkeypatch):
    monkeypatch.setattr(cfg, "PDF_PATH", str(tmp_path / "report.pdf"))
    resp = client.get("/download-pdf", query_string=small_form)
    assert resp.status_code == 200
    assert resp.data[:4] == b"%PDF"
    assert "report.pdf" in resp.headers["Content-Disposition"]


def test_download_pdf_rejects_bad_input(client, small_form):
    resp = client.get("/download-pdf", query_string=dict(small_form, measure_duration="x"))
    assert resp.status_code == 400
