from app.services.reports.records import ProductRecord
from tests.utils import auth_headers, line, make_invoice


def _seed(storage):
    storage.products = [ProductRecord(id=1, name="Tea")]
    storage.invoices = [
        make_invoice(1, "2024-03-15T09:30:00", [line(1, "Tea", 100, 1, purchasePrice=60)]),
        make_invoice(2, "2024-03-15T16:00:00", [line(1, "Tea", 100, 2, purchasePrice=60)]),
    ]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_report_requires_token(client):
    response = client.get("/reports")

    assert response.status_code == 401


def test_report_rejects_garbage_token(client):
    response = client.get("/reports", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_cashier_cannot_view_reports(client):
    response = client.get("/reports", headers=auth_headers(role="cashier"))

    assert response.status_code == 403
    assert response.json()["detail"] == "Permission required: reports:view"


def test_daily_report_uses_camel_case(client, storage):
    _seed(storage)

    response = client.get("/reports", params={"type": "daily", "date": "2024-03-15"}, headers=auth_headers())

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"summary", "chartData", "topProducts", "detailedReports"}
    assert body["summary"]["totalSales"] == 300.0
    assert body["summary"]["totalProfit"] == 120.0
    assert body["summary"]["salesCount"] == 2
    assert len(body["chartData"]) == 24
    assert body["topProducts"][0] == {"id": 1, "name": "Tea", "soldQuantity": 3.0, "revenue": 300.0, "profit": 120.0}
    sale = body["detailedReports"][0]
    assert sale["type"] == "sale"
    assert sale["customerName"] == "Walk-in"
    assert "productName" not in sale


def test_manager_can_use_cookie_token(client, storage):
    _seed(storage)
    token = auth_headers(role="manager")["Authorization"].split(" ", 1)[1]
    client.cookies.set("access_token", token)

    response = client.get("/reports", params={"type": "monthly", "date": "2024-03"})

    assert response.status_code == 200
    assert len(response.json()["chartData"]) == 31


def test_include_flags_are_read_from_query(client, storage):
    _seed(storage)

    response = client.get(
        "/reports",
        params={"date": "2024-03-15", "includeDetailedReports": "false", "includeTopProducts": "false"},
        headers=auth_headers(),
    )

    assert response.status_code == 200
    assert response.json()["detailedReports"] == []
    assert response.json()["topProducts"] == []
    assert "damaged_items" in storage.calls


def test_bad_date_is_a_bad_request(client):
    response = client.get("/reports", params={"date": "15-03-2024"}, headers=auth_headers())

    assert response.status_code == 400
    assert "Invalid date" in response.json()["detail"]


def test_unknown_report_type_is_rejected(client):
    response = client.get("/reports", params={"type": "hourly"}, headers=auth_headers())

    assert response.status_code == 422


def test_storage_failure_hides_details(client, storage):
    storage.fail = ConnectionError("password=hunter2 host unreachable")

    response = client.get("/reports", params={"date": "2024-03-15"}, headers=auth_headers())

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch report data"}


def test_year_outside_the_calendar_is_a_bad_request(client):
    response = client.get("/reports", params={"type": "yearly", "date": "0000"}, headers=auth_headers())

    assert response.status_code == 400


def test_first_supported_day_reports_zero_previous_period(client, storage):
    _seed(storage)

    response = client.get("/reports", params={"type": "daily", "date": "0001-01-01"}, headers=auth_headers())

    assert response.status_code == 200
    assert response.json()["summary"]["previousTotalSales"] == 0.0
