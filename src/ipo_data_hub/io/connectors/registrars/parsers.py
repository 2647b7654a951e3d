"""
Response parsing logic for registrar connectors.

Registrar sites answer with server-rendered HTML forms, ASP.NET JSON envelopes
(``{"d": ...}``) or entity-escaped XML fragments. Everything here is pure and
works on strings/dicts so it can be tested without a network.
"""

import re
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

HTML_PARSER = "html.parser"

PLACEHOLDER_OPTION_VALUES = ("", "0")

CHALLENGE_MARKERS = (
    "captcha",
    "verification code",
    "are you a robot",
    "security code",
)

NO_RECORD_MARKERS = (
    "no record",
    "no records",
    "not found",
    "no data found",
    "no details found",
    "invalid pan",
    "does not exist",
)

_ENTITY_REPLACEMENTS = (
    ("\\u003c", "<"),
    ("\\u003e", ">"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
)

_WHITESPACE_RE = re.compile(r"\s+")


def _soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup or "", HTML_PARSER)


def _cell_text(element) -> str:
    return _WHITESPACE_RE.sub(" ", element.get_text(" ", strip=True)).strip()


def is_placeholder_option(label: str, value: str) -> bool:
    """Dropdown entries such as ``-- Select Company --`` carry no company code."""
    return value.strip() in PLACEHOLDER_OPTION_VALUES or "select" in label.lower()


def parse_select_options(
    html: str, selectors: Sequence[str]
) -> Iterator[List[Tuple[str, str]]]:
    """
    Yield ``(label, value)`` option lists, one per CSS selector that matches.

    Selectors are tried in order; placeholder options are skipped and
    selectors that only match placeholders yield nothing.

    Args:
        html: Listing page markup
        selectors: CSS selectors pointing at ``<option>`` elements

    Yields:
        Non-empty lists of (label, value) pairs
    """
    soup = _soup(html)
    for selector in selectors:
        options: List[Tuple[str, str]] = []
        for option in soup.select(selector):
            value = str(option.get("value") or "").strip()
            label = _cell_text(option)
            if is_placeholder_option(label, value):
                continue
            options.append((label, value))
        if options:
            yield options


def decode_markup_payload(payload: str) -> str:
    """Undo the JSON/HTML entity escaping of an embedded XML fragment."""
    decoded = payload or ""
    for escaped, plain in _ENTITY_REPLACEMENTS:
        decoded = decoded.replace(escaped, plain)
    return decoded


def _table_records(markup: str) -> List[Dict[str, str]]:
    # html.parser lower-cases tag names, so <Table><ALLOT> arrive as table/allot
    soup = _soup(decode_markup_payload(markup))
    records: List[Dict[str, str]] = []
    for table in soup.find_all("table"):
        record: Dict[str, str] = {}
        for child in table.find_all(recursive=False):
            record[child.name.upper()] = child.get_text(strip=True)
        if record:
            records.append(record)
    return records


def parse_mufg_company_listing(payload: str) -> List[Tuple[str, str]]:
    """
    Extract ``(companyname, company_id)`` pairs from a MUFG ``GetDetails`` payload.

    Rows missing either field are dropped.
    """
    listing: List[Tuple[str, str]] = []
    for record in _table_records(payload):
        name = record.get("COMPANYNAME", "").strip()
        company_id = record.get("COMPANY_ID", "").strip()
        if name and company_id:
            listing.append((name, company_id))
    return listing


def parse_mufg_search_records(payload: str) -> List[Dict[str, str]]:
    """
    Extract applicant records from a MUFG ``SearchOnPan`` payload.

    Only ``<Table>`` rows are records; ``<Table1>`` carries status messages.
    """
    return [record for record in _table_records(payload) if "ALLOT" in record or "NAME1" in record]


def extract_hidden_fields(html: str) -> Dict[str, str]:
    """Capture every hidden input (view state, anti-forgery tokens ...)."""
    fields: Dict[str, str] = {}
    for element in _soup(html).find_all("input", attrs={"type": "hidden"}):
        name = element.get("name")
        if name:
            fields[name] = str(element.get("value") or "")
    return fields


def find_result_table(html: str, selectors: Sequence[str]):
    """Return the first table matched by ``selectors``, or None."""
    soup = _soup(html)
    for selector in selectors:
        table = soup.select_one(selector)
        if table is not None:
            return table
    return None


def extract_result_rows(html: str, selectors: Sequence[str]) -> Optional[List[List[str]]]:
    """
    Flatten a result table into rows of cell strings, header row first.

    Returns:
        None when no table matched at all, otherwise a list of rows
    """
    table = find_result_table(html, selectors)
    if table is None:
        return None
    rows: List[List[str]] = []
    for tr in table.find_all("tr"):
        cells = [_cell_text(cell) for cell in tr.find_all(["th", "td"])]
        if any(cells):
            rows.append(cells)
    return rows


def detect_challenge(html: str) -> bool:
    """True when the page asks for a captcha or similar human check."""
    soup = _soup(html)
    for element in soup.find_all(["input", "img"]):
        marker = f"{element.get('name', '')} {element.get('id', '')}".lower()
        if "captcha" in marker:
            return True
    text = soup.get_text(" ", strip=True).lower()
    return any(marker in text for marker in CHALLENGE_MARKERS)


def page_reports_no_record(html: str) -> bool:
    text = _soup(html).get_text(" ", strip=True).lower()
    return any(marker in text for marker in NO_RECORD_MARKERS)
