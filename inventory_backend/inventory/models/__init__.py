"""
PATH: inventory/models/__init__.py

Inventory models export surface.
"""

from .warehouse import Warehouse
from .inventory_item import InventoryItem
from .stock_movement import StockMovement
from .stock_adjustment import StockAdjustment, StockAdjustmentItem
from .stock_transfer import StockTransfer, StockTransferItem

__all__ = [
    "Warehouse",
    "InventoryItem",
    "StockMovement",
    "StockAdjustment",
    "StockAdjustmentItem",
    "StockTransfer",
    "StockTransferItem",
]
