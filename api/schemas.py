from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class TicketFiltersModel(BaseModel):
    search: str = ""
    status: str = "all"
    team: str = "all"


class KPIModel(BaseModel):
    total_tickets: int = 0
    pending_tickets: int = 0
    completed_tickets: int = 0
    avg_resolution_time: float = 0.0


class NoticeModel(BaseModel):
    title: str
    description: str
    variant: str = "default"


class TicketTableResponse(BaseModel):
    rows: List[Dict[str, str]] = Field(default_factory=list)
    showing: int = 0
    total: int = 0


class RefreshResponse(BaseModel):
    count: int
    last_updated: Optional[str] = None
    notices: List[NoticeModel] = Field(default_factory=list)


class MetaListResponse(BaseModel):
    values: List[str]


class ShareResponse(BaseModel):
    title: str
    text: str
    url: str
