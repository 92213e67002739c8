"""Integration tests for API endpoints"""

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from microlend_gateway.domain.exceptions import AssistantAPIError
from microlend_gateway.domain.models import RiskAssessment


def create_borrower(client: TestClient, name: str = "Maria Santos") -> str:
    response = client.post("/v1/borrowers", json={"name": name, "phone": "09171234567", "address": "Quezon City"})
    assert response.status_code == 201
    return response.json()["id"]


def issue_loan(client: TestClient, borrower_id: str, **overrides) -> dict:
    body = {
        "borrower_id": borrower_id,
        "principal": 1000,
        "interest_rate": 20,
        "term_days": 10,
        "payment_frequency": "daily",
        "start_date": "2024-03-04",
    }
    body.update(overrides)
    response = client.post("/v1/loans", json=body)
    assert response.status_code == 201
    return response.json()


def pay(client: TestClient, loan_id: str, amount: float, when: str = "2024-03-05T10:00:00"):
    return client.post("/v1/payments", json={"loan_id": loan_id, "amount": amount, "payment_date": when})


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "microlend_loans_issued_total" in response.text


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_issue_loan(client: TestClient):
    """POST /v1/loans fixes total payable and starts the balance at it"""
    loan = issue_loan(client, create_borrower(client))

    assert loan["total_payable"] == 1200
    assert loan["balance"] == 1200
    assert loan["status"] == "active"
    assert loan["due_date"] == "2024-03-14"
    assert loan["amortization"] == {"total_payable": 1200, "period_count": 10, "installment_target": 120}


def test_issue_loan_unknown_borrower(client: TestClient):
    response = client.post("/v1/loans", json={"borrower_id": "nope", "principal": 1000})
    assert response.status_code == 404


def test_issue_loan_validation(client: TestClient):
    borrower_id = create_borrower(client)

    assert client.post("/v1/loans", json={"borrower_id": borrower_id, "principal": 0}).status_code == 422
    assert (
        client.post(
            "/v1/loans", json={"borrower_id": borrower_id, "principal": 100, "payment_frequency": "hourly"}
        ).status_code
        == 422
    )


def test_issue_loan_defaults(client: TestClient):
    """Omitted terms fall back to the 5-6 defaults: 20% over 60 days, daily"""
    borrower_id = create_borrower(client)
    response = client.post("/v1/loans", json={"borrower_id": borrower_id, "principal": 5000})

    data = response.json()
    assert data["total_payable"] == 6000
    assert data["payment_frequency"] == "daily"
    assert data["amortization"]["period_count"] == 60
    assert data["amortization"]["installment_target"] == 100


def test_preview_loan(client: TestClient):
    response = client.post(
        "/v1/loans/preview",
        json={"principal": 1000, "interest_rate": 20, "term_days": 60, "payment_frequency": "weekly", "start_date": "2024-03-04"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_payable"] == 1200
    assert data["period_count"] == 9
    assert data["installment_target"] == 134
    assert data["due_date"] == "2024-05-03"


def test_loan_schedule(client: TestClient):
    loan = issue_loan(client, create_borrower(client))

    response = client.get(f"/v1/loans/{loan['id']}/schedule", params={"today": "2024-03-06"})

    assert response.status_code == 200
    entries = response.json()["entries"]
    assert len(entries) == 10
    assert entries[0] == {"date": "2024-03-05", "target_amount": 120, "temporal_class": "past"}
    assert entries[1]["temporal_class"] == "today"
    assert entries[-1]["date"] == "2024-03-14"


def test_issue_loan_rejects_overlong_schedule(client: TestClient):
    """Terms needing more than 1000 schedule entries are refused before anything is stored"""
    borrower_id = create_borrower(client)
    body = {"borrower_id": borrower_id, "principal": 1000, "term_days": 1500, "start_date": "2024-03-04"}

    response = client.post("/v1/loans", json=body)
    assert response.status_code == 422
    assert response.json()["detail"] == "Schedule exceeds 1000 periods"
    assert client.get("/v1/loans").json() == []

    assert client.post("/v1/loans/preview", json=body).status_code == 422


def test_issue_loan_at_schedule_cap(client: TestClient):
    loan = issue_loan(client, create_borrower(client), term_days=1000)

    response = client.get(f"/v1/loans/{loan['id']}/schedule", params={"today": "2024-03-04"})
    assert response.status_code == 200
    assert len(response.json()["entries"]) == 1000


def test_loan_not_found(client: TestClient):
    assert client.get("/v1/loans/missing").status_code == 404
    assert client.get("/v1/loans/missing/schedule").status_code == 404
    assert client.get("/v1/portal/loans/missing").status_code == 404


def test_list_loans_by_status(client: TestClient):
    borrower_id = create_borrower(client)
    first = issue_loan(client, borrower_id)
    issue_loan(client, borrower_id)
    client.post(f"/v1/loans/{first['id']}/default")

    assert len(client.get("/v1/loans").json()) == 2
    defaulted = client.get("/v1/loans", params={"status": "defaulted"}).json()
    assert [loan["id"] for loan in defaulted] == [first["id"]]


def test_update_notes(client: TestClient):
    loan = issue_loan(client, create_borrower(client))

    response = client.patch(f"/v1/loans/{loan['id']}/notes", json={"notes": "Sari-sari store capital"})

    assert response.status_code == 200
    assert response.json()["notes"] == "Sari-sari store capital"


def test_default_is_terminal(client: TestClient):
    loan = issue_loan(client, create_borrower(client))

    assert client.post(f"/v1/loans/{loan['id']}/default").json()["status"] == "defaulted"
    assert client.post(f"/v1/loans/{loan['id']}/default").status_code == 409


def test_payment_reduces_balance(client: TestClient):
    loan = issue_loan(client, create_borrower(client))

    response = pay(client, loan["id"], 120)

    assert response.status_code == 201
    data = response.json()
    assert data["payment"]["amount"] == 120
    assert data["loan"]["balance"] == 1080
    assert data["loan"]["status"] == "active"


def test_final_payment_marks_paid_and_blocks_more(client: TestClient):
    loan = issue_loan(client, create_borrower(client))

    response = pay(client, loan["id"], 1500)
    assert response.json()["loan"]["balance"] == 0
    assert response.json()["loan"]["status"] == "paid"

    assert pay(client, loan["id"], 10).status_code == 409


def test_payment_validation(client: TestClient):
    loan = issue_loan(client, create_borrower(client))

    assert pay(client, loan["id"], 0).status_code == 422
    assert pay(client, "missing", 100).status_code == 404


def test_list_payments(client: TestClient):
    loan = issue_loan(client, create_borrower(client))
    pay(client, loan["id"], 100, "2024-03-05T09:00:00")
    pay(client, loan["id"], 50, "2024-03-06T09:00:00")

    payments = client.get("/v1/payments", params={"loan_id": loan["id"]}).json()

    assert [p["amount"] for p in payments] == [50, 100]


def test_collections_worklist(client: TestClient):
    borrower_id = create_borrower(client)
    daily = issue_loan(client, borrower_id)
    weekly = issue_loan(client, borrower_id, payment_frequency="weekly", term_days=60)
    lump = issue_loan(client, borrower_id, payment_frequency="lump_sum", term_days=30)
    pay(client, daily["id"], 50, "2024-03-11T08:00:00")
    pay(client, daily["id"], 80, "2024-03-11T16:00:00")

    # 2024-03-11 is a Monday, one week after the Monday start
    response = client.get("/v1/collections", params={"date": "2024-03-11"})

    assert response.status_code == 200
    data = response.json()
    items = {item["loan_id"]: item for item in data["items"]}
    assert set(items) == {daily["id"], weekly["id"]}
    assert lump["id"] not in items
    assert data["due_count"] == 2

    assert items[daily["id"]]["paid_amount"] == 130
    assert items[daily["id"]]["remaining_due"] == 0
    assert items[daily["id"]]["is_paid"] is True
    assert items[daily["id"]]["borrower_name"] == "Maria Santos"

    assert items[weekly["id"]]["target_amount"] == 134
    assert items[weekly["id"]]["is_paid"] is False


def test_collections_before_start_is_empty(client: TestClient):
    issue_loan(client, create_borrower(client))

    data = client.get("/v1/collections", params={"date": "2024-03-01"}).json()
    assert data["items"] == []


def test_borrower_standing(client: TestClient):
    new_id = create_borrower(client, "New Borrower")
    good_id = create_borrower(client, "Good Payer")
    loan = issue_loan(client, good_id)
    pay(client, loan["id"], 1200)

    borrowers = {b["id"]: b for b in client.get("/v1/borrowers", params={"today": "2024-03-06"}).json()}

    assert borrowers[new_id]["standing"] == {"status": "New", "reason": "No history yet."}
    assert borrowers[good_id]["standing"]["status"] == "Good Payer"
    assert borrowers[good_id]["active_balance"] is None


def test_borrower_detail_overdue(client: TestClient):
    borrower_id = create_borrower(client)
    issue_loan(client, borrower_id)

    response = client.get(f"/v1/borrowers/{borrower_id}", params={"today": "2024-04-01"})

    assert response.status_code == 200
    data = response.json()
    assert data["standing"] == {"status": "Delinquent", "reason": "Has 1 overdue active loan(s)."}
    assert data["active_balance"] == 1200
    assert len(data["loans"]) == 1


def test_borrower_not_found(client: TestClient):
    assert client.get("/v1/borrowers/missing").status_code == 404


def test_dashboard(client: TestClient):
    borrower_id = create_borrower(client)
    loan = issue_loan(client, borrower_id)
    issue_loan(client, borrower_id, principal=500)
    pay(client, loan["id"], 120, "2024-03-05T10:00:00")

    data = client.get("/v1/dashboard", params={"today": "2024-03-06"}).json()

    assert data["total_lent"] == 1500
    assert data["total_receivable"] == 1800
    assert data["total_collected"] == 120
    assert data["outstanding"] == 1680
    assert data["simple_profit"] == -1380
    assert data["active_loans_count"] == 2
    assert len(data["daily_collections"]) == 7
    assert data["daily_collections"][-2] == {"date": "2024-03-05", "amount": 120}


def test_portal_statement(client: TestClient):
    loan = issue_loan(client, create_borrower(client))
    pay(client, loan["id"], 100, "2024-03-06T09:00:00")

    response = client.get(f"/v1/portal/loans/{loan['id']}", params={"today": "2024-03-06"})

    assert response.status_code == 200
    data = response.json()
    assert data["borrower_name"] == "Maria Santos"
    assert data["is_due_today"] is True
    assert data["current_installment"] == 120
    assert data["paid_today"] == 100
    assert data["remaining_today"] == 20
    assert data["fully_paid_today"] is False
    assert data["loan"]["balance"] == 1100
    assert len(data["schedule"]) == 10
    assert len(data["payments"]) == 1


def test_portal_resolves_short_reference(client: TestClient):
    """Borrowers are handed the first characters of the loan id, in any case"""
    loan = issue_loan(client, create_borrower(client))
    pay(client, loan["id"], 120, "2024-03-05T10:00:00")

    response = client.get(f"/v1/portal/loans/{loan['id'][:8].upper()}", params={"today": "2024-03-05"})

    assert response.status_code == 200
    data = response.json()
    assert data["loan"]["id"] == loan["id"]
    assert data["paid_today"] == 120
    assert len(data["payments"]) == 1


def test_portal_unknown_short_reference(client: TestClient):
    issue_loan(client, create_borrower(client))

    response = client.get("/v1/portal/loans/zzzz1234")
    assert response.status_code == 404


def test_payment_counts_toward_lender_day(client: TestClient):
    """07:30 in Manila is still the previous day in UTC"""
    loan = issue_loan(client, create_borrower(client))

    response = pay(client, loan["id"], 120, "2024-03-04T23:30:00Z")
    assert response.status_code == 201
    assert response.json()["payment"]["payment_date"].startswith("2024-03-05T07:30:00")

    collections = client.get("/v1/collections", params={"date": "2024-03-05"}).json()
    assert collections["items"][0]["paid_amount"] == 120
    assert collections["items"][0]["is_paid"] is True

    statement = client.get(f"/v1/portal/loans/{loan['id']}", params={"today": "2024-03-05"}).json()
    assert statement["fully_paid_today"] is True

    dashboard = client.get("/v1/dashboard", params={"today": "2024-03-05"}).json()
    assert dashboard["daily_collections"][-1] == {"date": "2024-03-05", "amount": 120}


@patch("microlend_gateway.infrastructure.clients.assistant.AssistantClient.generate_collection_message", new_callable=AsyncMock)
def test_reminder(mock_message: AsyncMock, client: TestClient):
    mock_message.return_value = "Hi Maria, paalala po sa bayad ninyo."
    loan = issue_loan(client, create_borrower(client))

    response = client.post("/v1/reminders", json={"loan_id": loan["id"], "tone": "firm"})

    assert response.status_code == 200
    assert response.json() == {"loan_id": loan["id"], "tone": "firm", "message": "Hi Maria, paalala po sa bayad ninyo."}
    kwargs = mock_message.call_args.kwargs
    assert kwargs["borrower_name"] == "Maria Santos"
    assert kwargs["tone"] == "firm"


@patch("microlend_gateway.infrastructure.clients.assistant.AssistantClient.generate_collection_message", new_callable=AsyncMock)
def test_reminder_assistant_down(mock_message: AsyncMock, client: TestClient):
    mock_message.side_effect = AssistantAPIError("timeout")
    loan = issue_loan(client, create_borrower(client))

    response = client.post("/v1/reminders", json={"loan_id": loan["id"]})
    assert response.status_code == 503


def test_reminder_unknown_tone(client: TestClient):
    loan = issue_loan(client, create_borrower(client))
    assert client.post("/v1/reminders", json={"loan_id": loan["id"], "tone": "rude"}).status_code == 422


@patch("microlend_gateway.infrastructure.clients.assistant.AssistantClient.analyze_borrower_risk", new_callable=AsyncMock)
def test_risk_analysis(mock_risk: AsyncMock, client: TestClient):
    mock_risk.return_value = RiskAssessment(risk_level="Low", analysis="Laging on time magbayad.")
    borrower_id = create_borrower(client)
    loan = issue_loan(client, borrower_id)
    pay(client, loan["id"], 1200)

    response = client.post(f"/v1/borrowers/{borrower_id}/risk-analysis")

    assert response.status_code == 200
    assert response.json()["risk_level"] == "Low"
    _, loans, payments = mock_risk.call_args.args
    assert len(loans) == 1
    assert len(payments) == 1
