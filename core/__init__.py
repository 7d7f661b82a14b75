"""Core (UI-agnostic) support ticket dashboard logic.

This package contains:
- CSV fetch + parse (HTTP -> TicketRecord)
- the snapshot cache and refresh scheduling
- KPI / group-by / time series aggregation (pandas)
- table filters, export helpers
- chart helpers (Altair -> Vega-Lite spec dict)
"""
