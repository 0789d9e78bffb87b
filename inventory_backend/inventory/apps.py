# inventory/apps.py

"""
INVENTORY APP CONFIG

Owns the stock ledger:
- Warehouses
- InventoryItem (per product x warehouse quantities)
- StockMovement (append-only audit log)
- Stock adjustment + stock transfer workflows
"""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
    verbose_name = "Inventory Ledger"
