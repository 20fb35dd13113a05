"""Tests for stock ledger rules."""

import pytest

from partsledger.core.entities.stock import MovementKind, StockMovement
from partsledger.core.exceptions import (
    InsufficientStockError,
    NoChangeError,
    ValidationError,
)
from partsledger.core.services.stock_ledger import (
    adjustment_note,
    plan_movement,
    replay,
    validate_quantity,
)


class TestValidateQuantity:
    def test_positive_in_out(self):
        assert validate_quantity(MovementKind.IN, 5) == 5
        assert validate_quantity(MovementKind.OUT, 1) == 1

    @pytest.mark.parametrize("kind", [MovementKind.IN, MovementKind.OUT])
    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_in_out_rejected(self, kind, quantity):
        with pytest.raises(ValidationError):
            validate_quantity(kind, quantity)

    def test_adjust_allows_zero(self):
        assert validate_quantity(MovementKind.ADJUST, 0) == 0

    def test_adjust_negative_rejected(self):
        with pytest.raises(ValidationError):
            validate_quantity(MovementKind.ADJUST, -1)

    @pytest.mark.parametrize("quantity", [1.5, "3", True, None])
    def test_non_integer_rejected(self, quantity):
        with pytest.raises(ValidationError):
            validate_quantity(MovementKind.IN, quantity)


class TestPlanMovement:
    """Tests for plan_movement."""

    def test_in_adds(self):
        posting = plan_movement(1, 70, MovementKind.IN, 30)
        assert posting.stock_before == 70
        assert posting.stock_after == 100
        assert posting.quantity == 30
        assert posting.note is None

    def test_out_subtracts(self):
        posting = plan_movement(1, 100, MovementKind.OUT, 30, note="line 3")
        assert posting.stock_after == 70
        assert posting.note == "line 3"

    def test_out_to_zero(self):
        assert plan_movement(1, 30, MovementKind.OUT, 30).stock_after == 0

    def test_out_beyond_stock(self):
        with pytest.raises(InsufficientStockError) as exc_info:
            plan_movement(1, 70, MovementKind.OUT, 100)
        assert exc_info.value.details["available"] == 70
        assert exc_info.value.details["requested"] == 100

    def test_adjust_down(self):
        posting = plan_movement(1, 100, MovementKind.ADJUST, 80)
        assert posting.quantity == 20
        assert posting.stock_after == 80
        assert posting.note == "Stock adjusted: 100 → 80 (Δ-20)"

    def test_adjust_up_with_note(self):
        posting = plan_movement(1, 80, MovementKind.ADJUST, 100, note="stocktake")
        assert posting.quantity == 20
        assert posting.note == "Stock adjusted: 80 → 100 (Δ+20) / stocktake"

    def test_adjust_to_same_value(self):
        with pytest.raises(NoChangeError):
            plan_movement(1, 50, MovementKind.ADJUST, 50)

    def test_blank_note_dropped(self):
        posting = plan_movement(1, 0, MovementKind.IN, 1, note="   ")
        assert posting.note is None


class TestAdjustmentNote:
    def test_without_note(self):
        assert adjustment_note(0, 5) == "Stock adjusted: 0 → 5 (Δ+5)"

    def test_with_note(self):
        assert adjustment_note(5, 0, "damaged") == "Stock adjusted: 5 → 0 (Δ-5) / damaged"


class TestReplay:
    def test_empty_ledger(self):
        assert replay([]) == 0

    def test_replay_matches_postings(self):
        stock = 0
        movements = []
        for kind, quantity in [
            (MovementKind.ADJUST, 100),
            (MovementKind.OUT, 30),
            (MovementKind.IN, 5),
            (MovementKind.ADJUST, 60),
            (MovementKind.OUT, 60),
        ]:
            posting = plan_movement(1, stock, kind, quantity)
            movements.append(
                StockMovement(
                    part_id=1,
                    user_id="u",
                    kind=posting.kind,
                    quantity=posting.quantity,
                    stock_before=posting.stock_before,
                    stock_after=posting.stock_after,
                )
            )
            stock = posting.stock_after

        assert stock == 0
        assert replay(movements) == stock
        assert replay(movements[:2]) == 70
