"""
Test doubles shared across the suite: a manual clock, a fake HTTP session
and a scripted fetcher.
"""
from datetime import datetime, timedelta, timezone
from typing import List

import requests


SAMPLE_CSV = """Ticket ID,Date Created,Customer Email,Category (Auto),Assigned Team,Priority,Status,Date Resolved
T-001,2024-01-01T09:00:00Z,ana@example.com,Billing,Finance,High,Resolved,2024-01-03T09:00:00Z
T-002,2024-01-01T15:30:00Z,bo@example.com,Login,Support,Low,Open,
T-003,2024-01-04T10:00:00Z,cy@example.com,Billing,Finance,Medium,In Progress,
T-004,2024-01-04T11:00:00Z,di@example.com,Outage,,Critical,resolved,2024-01-05T11:00:00Z
T-005,2024-01-07T08:00:00Z,ed@example.com,Login,Support,Low,,
"""


class FakeClock:
    """Manually advanced UTC clock"""

    def __init__(self, start: datetime = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200):
        self.text = text
        self.status_code = status_code
        self.encoding = None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Stands in for requests.Session; records every GET"""

    def __init__(self, response: FakeResponse = None, error: Exception = None):
        self.response = response or FakeResponse(SAMPLE_CSV)
        self.error = error
        self.calls: List[dict] = []

    def get(self, url, timeout=None):
        self.calls.append({"url": url, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


class CountingFetcher:
    """Fetcher returning a scripted sequence of results (records or exceptions).

    The last scripted result repeats once the script runs out.
    """

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        result = self.results[min(self.calls, len(self.results)) - 1]
        if isinstance(result, Exception):
            raise result
        return list(result)
