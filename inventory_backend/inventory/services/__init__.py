"""
PATH: inventory/services/__init__.py

Inventory services package.

Import concrete services from their modules (ledger, movements,
stock_adjustments, stock_transfers, reports); nothing is re-exported here so
models can import numbering helpers without import cycles.
"""
