from __future__ import annotations

from datetime import timedelta


CSV_URL = (
    "https://docs.google.com/spreadsheets/d/1JxttvYcfKqqWGEFQTo9rw6UGSecWQK-j_WB923WR9pc/export?format=csv"
)
DASHBOARD_URL = "http://localhost:8501"

CACHE_TTL = timedelta(hours=1)
REFRESH_INTERVAL = timedelta(hours=1)
REQUEST_TIMEOUT = 30.0
MAX_NOTICES = 20

TICKET_COLUMNS = {
    "Ticket ID": "ticket_id",
    "Date Created": "created",
    "Customer Email": "customer_email",
    "Category (Auto)": "category",
    "Assigned Team": "assigned_team",
    "Priority": "priority",
    "Status": "status",
    "Date Resolved": "resolved",
}

RESOLVED_STATUS = "resolved"
UNASSIGNED_TEAM = "Unassigned"
UNKNOWN_STATUS = "Unknown"
