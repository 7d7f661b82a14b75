"""
Pytest Configuration and Shared Fixtures

Provides ticket fixtures and a controllable clock so the dashboard core
can be tested without network access or real timers.
"""
import os
import sys
from typing import List

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.models import TicketRecord  # noqa: E402
from tests.helpers import SAMPLE_CSV, FakeClock  # noqa: E402


@pytest.fixture
def sample_csv() -> str:
    """Provide a five-row ticket export"""
    return SAMPLE_CSV


@pytest.fixture
def sample_records() -> List[TicketRecord]:
    """Provide the sample export parsed into records"""
    from core.data import parse_tickets

    return parse_tickets(SAMPLE_CSV)


@pytest.fixture
def clock() -> FakeClock:
    """Provide a manual UTC clock"""
    return FakeClock()
