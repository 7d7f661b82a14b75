from __future__ import annotations

import csv
import io
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

import pandas as pd
import requests

from core.config import CSV_URL, REQUEST_TIMEOUT
from core.errors import FetchError, ParseError
from core.models import TicketRecord


logger = logging.getLogger(__name__)


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def strip_columns(df: pd.DataFrame) -> pd.DataFrame:
    df.columns = [str(c).strip() for c in df.columns]
    return df


# ---------------- Fetch ----------------
def fetch_csv_text(
    url: str = CSV_URL,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> str:
    """GET the CSV export and return its body as UTF-8 text.

    Any transport failure or non-2xx status is raised as ``FetchError``.
    """
    http = session or requests
    try:
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Error fetching ticket data from %s: %s", url, exc)
        raise FetchError(str(exc)) from exc
    response.encoding = "utf-8"
    return response.text


# ---------------- Parse ----------------
_OVERFLOW = "__overflow__"


def _header_columns(text: str) -> List[str]:
    header = pd.read_csv(io.StringIO(text), nrows=0, index_col=False, dtype=str, engine="python")
    return [str(c) for c in header.columns]


def parse_tickets(text: str) -> List[TicketRecord]:
    """Parse CSV text into records keyed by the (trimmed) header row.

    Rows with more fields than the header are logged and dropped; the rest of
    the document is still returned. A document with no content yields ``[]``.
    """
    if not text or not text.strip():
        return []

    try:
        columns = _header_columns(text)
        # One spare trailing column catches rows with surplus fields;
        # index_col=False keeps pandas from turning them into an index.
        df = pd.read_csv(
            io.StringIO(text),
            header=0,
            names=columns + [_OVERFLOW],
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
        )
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, csv.Error) as exc:
        raise ParseError(str(exc)) from exc

    surplus = df[_OVERFLOW].notna()
    for fields in df.loc[surplus].drop(columns=_OVERFLOW).fillna("").to_dict(orient="records"):
        logger.warning("CSV parsing error, skipping row: %r", list(fields.values()))
    df = strip_columns(df.loc[~surplus].drop(columns=_OVERFLOW)).fillna("")

    records = [TicketRecord.from_row(row) for row in df.to_dict(orient="records")]
    logger.debug("Parsed %d ticket rows (%d columns)", len(records), len(df.columns))
    return records


def load_tickets(url: str = CSV_URL, *, session: Optional[requests.Session] = None) -> List[TicketRecord]:
    return parse_tickets(fetch_csv_text(url, session=session))
