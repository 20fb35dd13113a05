"""Tests for the Part entity."""

from partsledger.core.entities.part import Part


class TestPart:
    """Tests for Part entity."""

    def test_defaults(self):
        """Test default values."""
        part = Part(code="P-001", name="Bolt")
        assert part.id is None
        assert part.description is None
        assert part.price == 0.0
        assert part.stock == 0
        assert part.created_at.tzinfo is not None

    def test_stock_value(self):
        part = Part(code="P-001", name="Bolt", price=12.5, stock=8)
        assert part.stock_value == 100.0

    def test_stock_value_zero_stock(self):
        part = Part(code="P-001", name="Bolt", price=12.5)
        assert part.stock_value == 0.0
