from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Sequence

import pandas as pd

from core.models import TicketRecord


SHARE_TITLE = "Support Dashboard"
SHARE_TEXT = "Check out this support ticket dashboard"


def records_to_frame(records: Sequence[TicketRecord]) -> pd.DataFrame:
    """Source rows as a DataFrame; column order follows the first record."""
    rows = [r.to_row() for r in records]
    columns: List[str] = []
    for row in rows:
        columns.extend(c for c in row if c not in columns)
    return pd.DataFrame(rows, columns=columns).fillna("")


def records_to_csv(records: Sequence[TicketRecord]) -> bytes:
    if not records:
        return b""
    return records_to_frame(records).to_csv(index=False).encode("utf-8")


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"support-tickets-{today.isoformat()}.csv"


def share_payload(url: str) -> Dict[str, str]:
    return {"title": SHARE_TITLE, "text": SHARE_TEXT, "url": url}
