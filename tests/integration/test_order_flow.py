"""End-to-end flows over HTTP against a real SQLite database."""

import asyncio

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from partsledger.api.main import app

REQUESTER = {"X-User-Id": "user-1", "X-User-Role": "user"}
MANAGER = {"X-User-Id": "manager-1", "X-User-Role": "manager"}
HEADER = "部品コード,部品名,説明,価格,在庫数\n"


@pytest_asyncio.fixture
async def api(ledger_db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _create_part(api: AsyncClient, code: str = "P1", stock: int = 100, price: float = 50.0) -> dict:
    response = await api.post(
        "/api/parts",
        json={"code": code, "name": f"Part {code}", "price": price, "stock": stock},
        headers=REQUESTER,
    )
    assert response.status_code == 201, response.text
    return response.json()["part"]


class TestStockFlow:
    @pytest.mark.asyncio
    async def test_issue_then_overdraw(self, api: AsyncClient):
        part = await _create_part(api, stock=100)

        response = await api.post(
            "/api/stock/movements",
            json={"part_id": part["id"], "kind": "OUT", "quantity": 30},
            headers=REQUESTER,
        )
        assert response.status_code == 201
        assert response.json()["part"]["stock"] == 70

        response = await api.post(
            "/api/stock/movements",
            json={"part_id": part["id"], "kind": "OUT", "quantity": 100},
            headers=REQUESTER,
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "INSUFFICIENT_STOCK"

        response = await api.get(f"/api/parts/{part['id']}", headers=REQUESTER)
        assert response.json()["stock"] == 70

        response = await api.get(f"/api/parts/{part['id']}/ledger/verify", headers=REQUESTER)
        assert response.json()["consistent"] is True
        assert response.json()["movement_count"] == 2

    @pytest.mark.asyncio
    async def test_concurrent_issues(self, api: AsyncClient):
        part = await _create_part(api, stock=10)

        responses = await asyncio.gather(*(
            api.post(
                "/api/stock/movements",
                json={"part_id": part["id"], "kind": "OUT", "quantity": 4},
                headers=REQUESTER,
            )
            for _ in range(3)
        ))

        assert sorted(r.status_code for r in responses) == [201, 201, 409]
        response = await api.get(f"/api/parts/{part['id']}", headers=REQUESTER)
        assert response.json()["stock"] == 2

    @pytest.mark.asyncio
    async def test_delete_part_on_order(self, api: AsyncClient):
        part = await _create_part(api)
        await api.post(
            "/api/orders",
            json={"items": [{"part_id": part["id"], "quantity": 1}]},
            headers=REQUESTER,
        )

        response = await api.delete(f"/api/parts/{part['id']}", headers=REQUESTER)
        assert response.status_code == 400
        assert response.json()["error_code"] == "PART_IN_USE"


class TestOrderFlow:
    @pytest.mark.asyncio
    async def test_full_lifecycle(self, api: AsyncClient):
        part = await _create_part(api, stock=100, price=50.0)

        response = await api.post(
            "/api/orders",
            json={"items": [{"part_id": part["id"], "quantity": 10, "unit_price": 50}]},
            headers=REQUESTER,
        )
        assert response.status_code == 201
        order = response.json()
        assert order["order_number"] == "ORD-001"
        assert order["status"] == "DRAFT"
        assert order["total_amount"] == 500.0

        response = await api.post(f"/api/orders/{order['id']}/submit", headers=REQUESTER)
        assert response.json()["status"] == "PENDING"

        response = await api.post(f"/api/orders/{order['id']}/approve", headers=REQUESTER)
        assert response.status_code == 403

        response = await api.post(f"/api/orders/{order['id']}/approve", headers=MANAGER)
        assert response.status_code == 200
        assert response.json()["approved_by"] == "manager-1"

        response = await api.post(f"/api/orders/{order['id']}/receive", headers=MANAGER)
        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_TRANSITION"

        response = await api.post(f"/api/orders/{order['id']}/mark-ordered", headers=REQUESTER)
        assert response.json()["status"] == "ORDERED"

        response = await api.post(f"/api/orders/{order['id']}/receive", headers=REQUESTER)
        assert response.status_code == 200
        body = response.json()
        assert body["order"]["status"] == "RECEIVED"
        assert body["order"]["received_at"] is not None
        assert body["order"]["allowed_actions"] == []
        assert [(m["kind"], m["quantity"], m["reference"]) for m in body["movements"]] == [
            ("IN", 10, "ORD-001"),
        ]

        response = await api.get(f"/api/parts/{part['id']}", headers=REQUESTER)
        assert response.json()["stock"] == 110

        response = await api.get(
            f"/api/stock/movements?part_id={part['id']}&kind=IN", headers=REQUESTER
        )
        assert response.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, api: AsyncClient):
        part = await _create_part(api)
        response = await api.post(
            "/api/orders",
            json={"items": [{"part_id": part["id"], "quantity": 2}], "submit": True},
            headers=REQUESTER,
        )
        order = response.json()
        assert order["status"] == "PENDING"
        assert order["total_amount"] == 100.0

        response = await api.post(
            f"/api/orders/{order['id']}/reject", json={"reason": ""}, headers=MANAGER
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

        response = await api.post(
            f"/api/orders/{order['id']}/reject",
            json={"reason": "insufficient budget"},
            headers=MANAGER,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "REJECTED"
        assert response.json()["rejection_reason"] == "insufficient budget"

    @pytest.mark.asyncio
    async def test_edit_and_delete_draft(self, api: AsyncClient):
        first = await _create_part(api, code="P1", price=10.0)
        second = await _create_part(api, code="P2", price=3.0)
        response = await api.post(
            "/api/orders",
            json={"items": [{"part_id": first["id"], "quantity": 1}]},
            headers=REQUESTER,
        )
        order = response.json()

        response = await api.put(
            f"/api/orders/{order['id']}",
            json={"items": [{"part_id": second["id"], "quantity": 4}], "note": "swap"},
            headers=REQUESTER,
        )
        assert response.status_code == 200
        assert response.json()["total_amount"] == 12.0
        assert [i["part_id"] for i in response.json()["items"]] == [second["id"]]

        response = await api.delete(f"/api/orders/{order['id']}", headers=MANAGER)
        assert response.status_code == 403

        response = await api.delete(f"/api/orders/{order['id']}", headers=REQUESTER)
        assert response.status_code == 204
        response = await api.get(f"/api/orders/{order['id']}", headers=REQUESTER)
        assert response.status_code == 404


class TestCatalogCsvFlow:
    @pytest.mark.asyncio
    async def test_import_then_export(self, api: AsyncClient):
        await _create_part(api, code="P1", stock=5, price=2.0)
        content = (HEADER + "P1,Bolt,M8,2.5,8\nP2,Nut,,1,0\nP3,Washer,,x,1\n").encode()

        response = await api.post(
            "/api/parts/import",
            files={"file": ("parts.csv", content, "text/csv")},
            headers=REQUESTER,
        )
        assert response.status_code == 200
        body = response.json()
        assert (body["created"], body["updated"]) == (1, 1)
        assert body["errors"] == ["Row 4: price is not a number (x)"]

        response = await api.get("/api/parts/by-code/P1", headers=REQUESTER)
        assert response.json()["stock"] == 8
        assert response.json()["price"] == 2.5

        response = await api.get("/api/parts/export", headers=REQUESTER)
        assert response.status_code == 200
        assert "parts.csv" in response.headers["content-disposition"]
        lines = response.content.decode("utf-8-sig").splitlines()
        assert lines == [
            HEADER.strip(),
            "P1,Bolt,M8,2.5,8",
            "P2,Nut,,1,0",
        ]

    @pytest.mark.asyncio
    async def test_non_finite_price_row_is_skipped(self, api: AsyncClient):
        content = (HEADER + "P1,Bad,,nan,1\nP2,Good,,10,2\n").encode()

        response = await api.post(
            "/api/parts/import",
            files={"file": ("parts.csv", content, "text/csv")},
            headers=REQUESTER,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["errors"] == ["Row 2: price must be a finite number"]
        assert body["created"] == 1

        response = await api.get("/api/parts/by-code/P1", headers=REQUESTER)
        assert response.status_code == 404
        response = await api.get("/api/parts/by-code/P2", headers=REQUESTER)
        assert response.json()["stock"] == 2
