"""Tests for ImportPartsUseCase."""

from unittest.mock import AsyncMock

import pytest

from partsledger.application.use_cases.import_parts import (
    ImportPartsUseCase,
    ImportResult,
    decode_upload,
)
from partsledger.core.entities.part import Part
from partsledger.core.exceptions import (
    ConcurrencyConflictError,
    DatabaseError,
    DuplicateCodeError,
    UnauthenticatedError,
    ValidationError,
)

HEADER = "部品コード,部品名,説明,価格,在庫数\n"


@pytest.fixture
def mock_part_store():
    store = AsyncMock()
    store.import_part.side_effect = lambda part, user_id: (part, True)
    return store


@pytest.fixture
def use_case(mock_part_store):
    return ImportPartsUseCase(part_store=mock_part_store)


class TestImportPartsUseCase:
    @pytest.mark.asyncio
    async def test_creates_new_parts(self, use_case, mock_part_store, requester):
        text = HEADER + "P-001,Bolt,M8,2.5,10\nP-002,Nut,,1,0\n"

        result = await use_case.execute(text, requester)

        assert result.success
        assert result.created == 2
        assert result.updated == 0
        first, user_id = mock_part_store.import_part.await_args_list[0].args
        assert (first.code, first.price, first.stock) == ("P-001", 2.5, 10)
        assert user_id == "user-1"
        second = mock_part_store.import_part.await_args_list[1].args[0]
        assert second.description is None

    @pytest.mark.asyncio
    async def test_counts_updated_rows(self, use_case, mock_part_store, requester):
        mock_part_store.import_part.side_effect = lambda part, user_id: (part, False)

        result = await use_case.execute(HEADER + "P-001,Bolt,,3,9\n", requester)

        assert result.updated == 1
        assert result.created == 0
        row = mock_part_store.import_part.await_args.args[0]
        assert (row.name, row.price, row.stock) == ("Bolt", 3.0, 9)

    @pytest.mark.asyncio
    async def test_bad_rows_are_reported_and_skipped(self, use_case, requester):
        text = HEADER + "P-001,Bolt,,abc,1\n,NoCode,,1,1\nP-003,Washer,,1,1\n"

        result = await use_case.execute(text, requester)

        assert result.created == 1
        assert not result.success
        assert result.errors[0].startswith("Row 2: price is not a number")
        assert result.errors[1] == "Row 3: part code is required"

    @pytest.mark.asyncio
    async def test_non_finite_price_does_not_stop_the_import(
        self, use_case, mock_part_store, requester
    ):
        text = HEADER + "P1,Bad,,nan,1\nP2,Good,,10,2\n"

        result = await use_case.execute(text, requester)

        assert result.errors == ["Row 2: price must be a finite number"]
        assert result.created == 1
        assert mock_part_store.import_part.await_args.args[0].code == "P2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            DuplicateCodeError("P-001"),
            ConcurrencyConflictError("import_part", "database is locked"),
            DatabaseError("import_part", "NOT NULL constraint failed: parts.price"),
        ],
    )
    async def test_store_errors_name_the_row_and_continue(
        self, use_case, mock_part_store, requester, error
    ):
        mock_part_store.import_part.side_effect = [error, (Part(code="P-002", name="Nut"), True)]

        result = await use_case.execute(HEADER + "P-001,Bolt,,1,1\nP-002,Nut,,1,1\n", requester)

        assert result.created == 1
        assert result.updated == 0
        assert result.errors == [f"Row 2 (P-001): {error.message}"]

    @pytest.mark.asyncio
    async def test_empty_file(self, use_case, requester):
        result = await use_case.execute(HEADER, requester)
        assert result.errors == ["No data rows"]

    @pytest.mark.asyncio
    async def test_requires_user(self, use_case):
        with pytest.raises(UnauthenticatedError):
            await use_case.execute(HEADER, None)

    def test_to_response(self, use_case):
        response = use_case.to_response(ImportResult(created=1, errors=["Row 2: x"]))
        assert response.success is False
        assert response.created == 1


class TestDecodeUpload:
    def test_strips_bom(self):
        assert decode_upload("\ufeffabc".encode()) == "abc"

    def test_rejects_non_utf8(self):
        with pytest.raises(ValidationError):
            decode_upload("部品".encode("shift_jis"))
