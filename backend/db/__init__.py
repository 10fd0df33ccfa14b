"""
Stock pricing tables.

Models:
- Unit, Product, UnitInProduct (which units a product is tracked in)
- Maintains (outlet / production house)
- StockBatch, Stock (per-unit stock lines, grouped in batches), DailyStockRecord
- DeliveryHistory (carries the latest unit price snapshot), Sale
"""

# Load db.database first so every model module finds Base already defined.
from db import database  # noqa: F401
