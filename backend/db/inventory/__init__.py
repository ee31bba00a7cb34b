"""
Per-location stock.

Models:
- ItemStock (amount per item per location, at most one row per pair)

The scan engine in core.stock_engine is the only code that moves amounts by
one; /api/stock/adjust applies arbitrary clamped deltas.
"""
