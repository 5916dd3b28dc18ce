"""Integration tests for API endpoints"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import patch
from fastapi.testclient import TestClient
from fintrack.infrastructure.database.repositories import DebtRepository
from fintrack.utils.date_utils import add_months


def create_debt(client: TestClient, headers: dict, **overrides) -> dict:
    body = {"total_amount": "1000", "tenor": 3, "start_date": "2024-01-15", "note": "Laptop loan"}
    body.update(overrides)
    response = client.post("/v1/debts", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "fintrack_debt_created_total" in response.text


def test_metrics_label_full_route_template(client: TestClient, auth_headers):
    debt_id = create_debt(client, auth_headers)["debt_ids"][0]
    assert client.get(f"/v1/debts/{debt_id}", headers=auth_headers).status_code == 200

    metrics = client.get("/metrics").text
    assert 'endpoint="/v1/debts/{debt_id}"' in metrics
    assert f'endpoint="/v1/debts/{debt_id}"' not in metrics


def test_request_id_header(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    response = client.get("/health")
    assert response.headers["X-Request-ID"]


def test_missing_token_is_rejected(client: TestClient):
    response = client.get("/v1/debts")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_malformed_authorization_header(client: TestClient):
    response = client.get("/v1/debts", headers={"Authorization": "Basic abc"})
    assert response.status_code == 401


def test_unknown_token_is_rejected(client: TestClient):
    response = client.get("/v1/debts", headers={"Authorization": "Bearer forged"})
    assert response.status_code == 401


def test_identity_verified_once_per_token(client: TestClient, identity_client, auth_headers):
    """Repeated requests reuse the app's auth state instead of re-querying the provider"""
    client.get("/v1/debts", headers=auth_headers)
    client.get("/v1/debts", headers=auth_headers)
    assert identity_client.calls == 1

    # Signing out forgets the cached identity
    response = client.delete("/v1/auth/session", headers=auth_headers)
    assert response.status_code == 204

    client.get("/v1/debts", headers=auth_headers)
    assert identity_client.calls == 2


def test_create_session_saves_profile(client: TestClient, other_user_headers):
    response = client.post("/v1/auth/session", headers=other_user_headers)

    assert response.status_code == 200
    assert response.json() == {"uid": "user_bob", "email": "bob@example.com", "display_name": "bob"}

    # Signing in again refreshes rather than duplicates
    response = client.post("/v1/auth/session", headers=other_user_headers)
    assert response.status_code == 200


def test_create_debt_with_installments(client: TestClient, auth_headers):
    """POST /v1/debts splits the total and persists one debt per installment"""
    data = create_debt(client, auth_headers)

    assert data["tenor"] == 3
    assert len(data["debt_ids"]) == 3
    assert [Decimal(i["amount"]) for i in data["installments"]] == [
        Decimal("333.33"),
        Decimal("333.33"),
        Decimal("333.34"),
    ]
    assert [i["due_date"] for i in data["installments"]] == ["2024-01-15", "2024-02-15", "2024-03-15"]
    assert [i["sequence_label"] for i in data["installments"]] == [
        "Laptop loan, 1/3",
        "Laptop loan, 2/3",
        "Laptop loan, 3/3",
    ]

    listing = client.get("/v1/debts", headers=auth_headers).json()
    assert [d["id"] for d in listing["debts"]] == data["debt_ids"]
    assert all(d["paid"] is False for d in listing["debts"])
    assert sum(Decimal(d["amount"]) for d in listing["debts"]) == Decimal("1000")
    assert [Decimal(d["installment_amount"]) for d in listing["debts"]] == [
        Decimal(d["amount"]) for d in listing["debts"]
    ]


def test_create_single_debt_keeps_note(client: TestClient, auth_headers):
    data = create_debt(client, auth_headers, total_amount="500", tenor=1, start_date="2024-06-01", note="Rent")

    assert len(data["installments"]) == 1
    assert data["installments"][0]["sequence_label"] == "Rent"
    assert Decimal(data["installments"][0]["amount"]) == Decimal("500")


@pytest.mark.parametrize("tenor", [0, -3])
def test_create_debt_invalid_tenor(client: TestClient, auth_headers, tenor):
    response = client.post(
        "/v1/debts",
        json={"total_amount": "1000", "tenor": tenor, "note": "Loan"},
        headers=auth_headers,
    )
    assert response.status_code == 422


def test_create_debt_invalid_amount(client: TestClient, auth_headers):
    response = client.post(
        "/v1/debts",
        json={"total_amount": "-5", "tenor": 2, "note": "Loan"},
        headers=auth_headers,
    )
    assert response.status_code == 422

    response = client.post(
        "/v1/debts",
        json={"total_amount": "10.005", "tenor": 2, "note": "Loan"},
        headers=auth_headers,
    )
    assert response.status_code == 422
    assert "decimal places" in response.json()["detail"]


def test_create_debt_rolls_back_partial_batch(client: TestClient, auth_headers):
    """A failure on the 2nd installment leaves no debts behind"""
    original = DebtRepository.create_debt_record
    calls = {"count": 0}

    def flaky_create(self, *args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 2:
            raise RuntimeError("database went away")
        return original(self, *args, **kwargs)

    with patch.object(DebtRepository, "create_debt_record", flaky_create):
        response = client.post(
            "/v1/debts",
            json={"total_amount": "900", "tenor": 3, "start_date": "2024-01-15", "note": "TV"},
            headers=auth_headers,
        )

    assert response.status_code == 500
    assert client.get("/v1/debts", headers=auth_headers).json()["debts"] == []


def test_mark_debt_paid(client: TestClient, auth_headers):
    debt_id = create_debt(client, auth_headers)["debt_ids"][0]

    response = client.post(f"/v1/debts/{debt_id}/paid", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["paid"] is True

    # Idempotent
    response = client.post(f"/v1/debts/{debt_id}/paid", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["paid"] is True

    assert client.get(f"/v1/debts/{debt_id}", headers=auth_headers).json()["paid"] is True


def test_debts_are_private(client: TestClient, auth_headers, other_user_headers):
    debt_id = create_debt(client, auth_headers)["debt_ids"][0]

    assert client.get(f"/v1/debts/{debt_id}", headers=other_user_headers).status_code == 404
    assert client.post(f"/v1/debts/{debt_id}/paid", headers=other_user_headers).status_code == 404
    assert client.delete(f"/v1/debts/{debt_id}", headers=other_user_headers).status_code == 404
    assert client.get("/v1/debts", headers=other_user_headers).json()["debts"] == []


def test_debt_id_validation(client: TestClient, auth_headers):
    assert client.post("/v1/debts/not-a-uuid/paid", headers=auth_headers).status_code == 400

    fake_uuid = "00000000-0000-0000-0000-000000000000"
    assert client.post(f"/v1/debts/{fake_uuid}/paid", headers=auth_headers).status_code == 404


def test_delete_debt(client: TestClient, auth_headers):
    debt_ids = create_debt(client, auth_headers)["debt_ids"]

    response = client.delete(f"/v1/debts/{debt_ids[0]}", headers=auth_headers)
    assert response.status_code == 204

    assert client.get(f"/v1/debts/{debt_ids[0]}", headers=auth_headers).status_code == 404
    assert len(client.get("/v1/debts", headers=auth_headers).json()["debts"]) == 2


def test_upcoming_debts_pagination(client: TestClient, auth_headers):
    """Unpaid debts from today on, 5 per page by default"""
    today = date.today()
    create_debt(client, auth_headers, total_amount="700", tenor=7, start_date=today.isoformat(), note="Car")
    # Overdue debt is not upcoming
    create_debt(client, auth_headers, total_amount="50", tenor=1, start_date=add_months(today, -2).isoformat(), note="Old")

    first = client.get("/v1/debts/upcoming", headers=auth_headers).json()
    assert len(first["debts"]) == 5
    assert first["has_more"] is True
    assert [d["note"] for d in first["debts"]] == [f"Car, {i}/7" for i in range(1, 6)]

    second = client.get(
        "/v1/debts/upcoming", params={"cursor": first["next_cursor"]}, headers=auth_headers
    ).json()
    assert [d["note"] for d in second["debts"]] == ["Car, 6/7", "Car, 7/7"]
    assert second["has_more"] is False
    assert second["next_cursor"] is None


def test_upcoming_debts_excludes_paid(client: TestClient, auth_headers):
    today = date.today()
    debt_ids = create_debt(client, auth_headers, total_amount="300", tenor=3, start_date=today.isoformat(), note="Car")["debt_ids"]
    client.post(f"/v1/debts/{debt_ids[0]}/paid", headers=auth_headers)

    upcoming = client.get("/v1/debts/upcoming", headers=auth_headers).json()
    assert [d["id"] for d in upcoming["debts"]] == debt_ids[1:]


def test_upcoming_debts_bad_cursor(client: TestClient, auth_headers):
    response = client.get("/v1/debts/upcoming", params={"cursor": "nope"}, headers=auth_headers)
    assert response.status_code == 400

    fake_uuid = "00000000-0000-0000-0000-000000000000"
    response = client.get("/v1/debts/upcoming", params={"cursor": fake_uuid}, headers=auth_headers)
    assert response.status_code == 400


def test_history_pagination(client: TestClient, auth_headers):
    """GET /v1/history pages through all debts, 10 at a time"""
    create_debt(client, auth_headers, total_amount="1200", tenor=12, start_date="2023-01-10", note="Phone")

    first = client.get("/v1/history", headers=auth_headers).json()
    assert len(first["debts"]) == 10
    assert first["has_more"] is True

    second = client.get("/v1/history", params={"cursor": first["next_cursor"]}, headers=auth_headers).json()
    assert len(second["debts"]) == 2
    assert second["has_more"] is False

    due_dates = [d["due_date"] for d in first["debts"] + second["debts"]]
    assert due_dates == sorted(due_dates)
    assert due_dates[0] == "2023-01-10"
    assert due_dates[-1] == "2023-12-10"


def test_record_income_and_expense(client: TestClient, auth_headers):
    response = client.post(
        "/v1/incomes",
        json={"amount": "5000000", "date": "2024-03-01", "note": "  "},
        headers=auth_headers,
    )
    assert response.status_code == 201
    income = response.json()
    assert income["category"] == "salary"
    assert income["note"] is None  # blank notes are dropped

    response = client.post(
        "/v1/expenses",
        json={"amount": "150000", "date": "2024-03-02", "category": "Food & Drinks", "note": "Groceries"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.json()["note"] == "Groceries"

    client.post(
        "/v1/expenses",
        json={"amount": "99", "date": "2024-04-02", "category": "Other"},
        headers=auth_headers,
    )

    march = client.get("/v1/expenses", params={"month": "2024-03"}, headers=auth_headers).json()
    assert len(march["entries"]) == 1
    assert Decimal(march["total"]) == Decimal("150000")

    everything = client.get("/v1/expenses", headers=auth_headers).json()
    assert [e["date"] for e in everything["entries"]] == ["2024-04-02", "2024-03-02"]  # newest first


def test_entry_validation(client: TestClient, auth_headers):
    assert client.post("/v1/incomes", json={"amount": "0"}, headers=auth_headers).status_code == 422
    assert client.post("/v1/expenses", json={"amount": "10"}, headers=auth_headers).status_code == 422
    assert (
        client.post("/v1/expenses", json={"amount": "10", "category": "Yachts"}, headers=auth_headers).status_code
        == 422
    )
    assert client.get("/v1/incomes", params={"month": "2024-13"}, headers=auth_headers).status_code == 422


def test_summary_endpoint(client: TestClient, auth_headers):
    """Balance and debt-to-income move as debts get paid"""
    today = date.today()
    month = today.strftime("%Y-%m")

    client.post("/v1/incomes", json={"amount": "10000000", "category": "salary"}, headers=auth_headers)
    client.post("/v1/incomes", json={"amount": "500000", "category": "bonus"}, headers=auth_headers)
    client.post("/v1/expenses", json={"amount": "2000000", "category": "Bills"}, headers=auth_headers)
    debt = create_debt(client, auth_headers, total_amount="3000000", tenor=3, start_date=today.isoformat(), note="Laptop")

    summary = client.get("/v1/summary", headers=auth_headers).json()
    assert summary["month"] == month
    assert Decimal(summary["total_income"]) == Decimal("10500000")
    assert Decimal(summary["salary_income"]) == Decimal("10000000")
    assert Decimal(summary["balance"]) == Decimal("8500000")
    assert Decimal(summary["total_debt"]) == Decimal("3000000")
    assert Decimal(summary["monthly_debt"]) == Decimal("1000000")
    assert summary["debt_to_income_ratio"] == 10.0
    assert summary["health_status"] == "healthy"
    assert [d["id"] for d in summary["debts_due_this_month"]] == debt["debt_ids"][:1]
    assert [d["id"] for d in summary["upcoming_debts"]] == debt["debt_ids"][1:]

    client.post(f"/v1/debts/{debt['debt_ids'][0]}/paid", headers=auth_headers)

    summary = client.get("/v1/summary", params={"month": month}, headers=auth_headers).json()
    assert Decimal(summary["balance"]) == Decimal("7500000")
    assert Decimal(summary["total_debt"]) == Decimal("2000000")
    assert summary["debts_due_this_month"] == []
    assert summary["debt_to_income_ratio"] == 0.0


def test_create_debt_blank_note(client: TestClient, auth_headers):
    response = client.post(
        "/v1/debts",
        json={"total_amount": "100", "tenor": 2, "note": "   "},
        headers=auth_headers,
    )
    assert response.status_code == 422


def test_create_debt_tenor_above_limit(client: TestClient, auth_headers):
    response = client.post(
        "/v1/debts",
        json={"total_amount": "1000", "tenor": 100000, "start_date": "2024-01-15", "note": "Loan"},
        headers=auth_headers,
    )
    assert response.status_code == 422
    assert client.get("/v1/debts", headers=auth_headers).json()["debts"] == []
