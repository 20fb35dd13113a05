"""Parts catalog, stock ledger and purchase-order workflow service."""

__version__ = "1.0.0"
