"""API tests for stock ledger endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from partsledger.api.dependencies import get_ledger, get_record_movement_use_case
from partsledger.api.main import app
from partsledger.application.use_cases.record_movement import (
    RecordMovementResult,
    RecordMovementUseCase,
)
from partsledger.core.entities.part import Part
from partsledger.core.entities.stock import MovementKind, StockMovement
from partsledger.core.exceptions import InsufficientStockError, NoChangeError


def _movement() -> StockMovement:
    return StockMovement(
        id=1, part_id=1, user_id="user-1", kind=MovementKind.OUT,
        quantity=30, stock_before=100, stock_after=70,
    )


@pytest.fixture
def mock_ledger_store():
    store = AsyncMock()
    store.list_movements.return_value = [_movement()]
    store.count_movements.return_value = 3
    return store


@pytest.fixture
def mock_record_use_case():
    uc = AsyncMock(spec=RecordMovementUseCase)
    result = RecordMovementResult(part=Part(id=1, code="P1", name="Bolt", stock=70), movement=_movement())
    uc.execute.return_value = result
    uc.to_response.return_value = RecordMovementUseCase().to_response(result)
    return uc


@pytest.fixture
def stock_client(client, mock_ledger_store, mock_record_use_case):
    app.dependency_overrides[get_ledger] = lambda: mock_ledger_store
    app.dependency_overrides[get_record_movement_use_case] = lambda: mock_record_use_case
    return client


class TestStockAPI:
    @pytest.mark.asyncio
    async def test_record_movement(self, stock_client: AsyncClient, user_headers):
        response = await stock_client.post(
            "/api/stock/movements",
            json={"part_id": 1, "kind": "OUT", "quantity": 30},
            headers=user_headers,
        )
        assert response.status_code == 201
        assert response.json()["part"]["stock"] == 70

    @pytest.mark.asyncio
    async def test_unknown_kind_is_422(self, stock_client: AsyncClient, user_headers):
        response = await stock_client.post(
            "/api/stock/movements",
            json={"part_id": 1, "kind": "TRANSFER", "quantity": 1},
            headers=user_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_insufficient_stock_is_409(
        self, stock_client: AsyncClient, user_headers, mock_record_use_case
    ):
        mock_record_use_case.execute.side_effect = InsufficientStockError(1, 100, 70)
        response = await stock_client.post(
            "/api/stock/movements",
            json={"part_id": 1, "kind": "OUT", "quantity": 100},
            headers=user_headers,
        )
        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "INSUFFICIENT_STOCK"
        assert "available=70" in body["detail"]

    @pytest.mark.asyncio
    async def test_no_change_is_409(
        self, stock_client: AsyncClient, user_headers, mock_record_use_case
    ):
        mock_record_use_case.execute.side_effect = NoChangeError(1, 5)
        response = await stock_client.post(
            "/api/stock/movements",
            json={"part_id": 1, "kind": "ADJUST", "quantity": 5},
            headers=user_headers,
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "NO_CHANGE"

    @pytest.mark.asyncio
    async def test_list_movements(self, stock_client: AsyncClient, user_headers, mock_ledger_store):
        response = await stock_client.get(
            "/api/stock/movements?part_id=1&kind=OUT&limit=1", headers=user_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert body["has_more"] is True
        mock_ledger_store.list_movements.assert_awaited_once_with(
            part_id=1, kind=MovementKind.OUT, limit=1, offset=0
        )

    @pytest.mark.asyncio
    async def test_list_requires_user(self, stock_client: AsyncClient):
        response = await stock_client.get("/api/stock/movements")
        assert response.status_code == 401
