"""
Allotment status classification rules.

Registrars report outcomes as free text ("Allotted 50 shares", "NON-ALLOTTEE"),
share counts ("0", "150") or result tables. The functions here map those raw
shapes onto StatusKind and build AllotmentDetail blocks from whatever fields a
registrar returned. They are pure: no I/O and no registrar-specific transport
knowledge.
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .models import AllotmentDetail, StatusKind

NEGATIVE_ALLOTMENT_PHRASES = ("non-allot", "not allot", "non allot")

NO_RECORD_PHRASES = (
    "no record",
    "not found",
    "no data found",
    "no details",
    "does not exist",
    "invalid pan",
)

JSON_STATUS_KEYS = (
    "allotmentStatus",
    "AllotmentStatus",
    "allotment_status",
    "ALLOTED",
    "allotted",
    "status",
    "Status",
    "STATUS",
)

JSON_MESSAGE_KEYS = ("message", "Message", "msg", "Msg", "error", "Error")

# Ordered candidate keys per AllotmentDetail field, across registrar spellings
DETAIL_KEY_ALIASES: Dict[str, Sequence[str]] = {
    "applicant_name": ("applicantName", "ApplicantName", "applicant_name", "Name", "name", "NAME1"),
    "application_number": (
        "applicationNumber",
        "ApplicationNumber",
        "ApplicationNo",
        "applicationNo",
        "APPLICATION_NO",
    ),
    "dp_id": ("dpId", "DpId", "DPID", "dp_id", "DPCLITID"),
    "category": ("category", "Category", "CATEGORY"),
    "shares_applied": ("sharesApplied", "SharesApplied", "APPLIED", "SHARES", "shares_applied"),
    "shares_allotted": ("sharesAllotted", "SharesAllotted", "ALLOT", "shares_allotted"),
    "refund_amount": ("refundAmount", "RefundAmount", "REFUND", "refund_amount"),
}

# Header keywords used to map result-table columns onto detail fields, in
# order of preference
HEADER_KEYWORDS: Dict[str, Sequence[str]] = {
    "applicant_name": ("applicant", "investor", "name"),
    "application_number": ("application",),
    "dp_id": ("dp", "client id", "demat"),
    "category": ("category",),
    "shares_applied": ("applied",),
    "shares_allotted": ("allot",),
    "refund_amount": ("refund",),
}

HEADER_EXCLUDES: Dict[str, Sequence[str]] = {
    "applicant_name": ("company",),
}

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


def _first_text(record: Mapping[str, Any], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = record.get(key)
        if value is None or isinstance(value, (dict, list)):
            continue
        cleaned = str(value).strip()
        if cleaned:
            return cleaned
    return None


def mentions_no_record(text: Optional[str]) -> bool:
    lowered = (text or "").lower()
    return any(phrase in lowered for phrase in NO_RECORD_PHRASES)


def classify_allotment_text(text: Optional[str]) -> StatusKind:
    """
    Classify a registrar's free-text allotment wording.

    Negative phrases win over the bare "allot" stem; anything else, including
    empty text, is treated as still pending.
    """
    lowered = (text or "").strip().lower()
    if any(phrase in lowered for phrase in NEGATIVE_ALLOTMENT_PHRASES):
        return StatusKind.NOT_ALLOTTED
    if "allot" in lowered and "non" not in lowered and "not" not in lowered:
        return StatusKind.ALLOTTED
    return StatusKind.PENDING


def parse_share_count(value: Optional[str]) -> Optional[int]:
    """Leading integer of a share-count cell (``"1,500 shares"`` -> 1500)."""
    if value is None:
        return None
    match = _LEADING_INT_RE.match(str(value).replace(",", ""))
    return int(match.group(1)) if match else None


def classify_allotted_count(value: Optional[str]) -> StatusKind:
    """
    Positive count => Allotted, zero/empty => NotAllotted, anything else => Pending.

    Any value that parses to zero (``"00"``, ``"0 shares"``) counts as
    NotAllotted, not only the literal ``"0"``.
    """
    cleaned = (value or "").strip()
    if not cleaned:
        return StatusKind.NOT_ALLOTTED
    count = parse_share_count(cleaned)
    if count is None:
        return StatusKind.PENDING
    return StatusKind.ALLOTTED if count > 0 else StatusKind.NOT_ALLOTTED


def allotted_column_index(header: Sequence[str]) -> int:
    """Column holding allotted shares: prefer "shares allotted", then any "allot", else the last."""
    lowered = [cell.lower() for cell in header]
    for index, cell in enumerate(lowered):
        if "allot" in cell and "share" in cell:
            return index
    for index, cell in enumerate(lowered):
        if "allot" in cell:
            return index
    return max(len(header) - 1, 0)


def _cell_is_positive(cell: str) -> bool:
    count = parse_share_count(cell)
    if count is not None:
        return count > 0
    return classify_allotment_text(cell) == StatusKind.ALLOTTED


def classify_result_rows(
    rows: Optional[List[List[str]]], *, page_reports_no_record: bool = False
) -> StatusKind:
    """
    Classify a scraped result table, header row first.

    - No table at all: NoRecordFound when the page says so, else Unknown
    - Header only (or empty): NoRecordFound
    - Data rows: any positive allotted value => Allotted, else NotAllotted
    """
    if rows is None:
        return StatusKind.NO_RECORD_FOUND if page_reports_no_record else StatusKind.UNKNOWN
    if len(rows) < 2:
        return StatusKind.NO_RECORD_FOUND

    column = allotted_column_index(rows[0])
    for row in rows[1:]:
        if column < len(row) and _cell_is_positive(row[column]):
            return StatusKind.ALLOTTED
    return StatusKind.NOT_ALLOTTED


def detail_from_record(
    record: Mapping[str, Any],
    status: StatusKind,
    *,
    allotment_status: Optional[str] = None,
) -> AllotmentDetail:
    """Build an AllotmentDetail from a JSON/XML record using known key spellings."""
    fields = {
        field: _first_text(record, keys) for field, keys in DETAIL_KEY_ALIASES.items()
    }
    if allotment_status is None:
        allotment_status = _first_text(record, JSON_STATUS_KEYS)
    return AllotmentDetail(allotment_status=allotment_status, status=status.label, **fields)


def _header_column(
    header: Sequence[str], keywords: Sequence[str], excludes: Sequence[str], used: set
) -> Optional[int]:
    for keyword in keywords:
        for index, cell in enumerate(header):
            lowered = cell.lower()
            if index in used or any(word in lowered for word in excludes):
                continue
            if keyword in lowered:
                return index
    return None


def detail_from_table_row(
    header: Sequence[str], row: Sequence[str], status: StatusKind
) -> AllotmentDetail:
    """Build an AllotmentDetail by matching header keywords to detail fields."""
    fields: Dict[str, Optional[str]] = {}
    used_columns = set()
    for field, keywords in HEADER_KEYWORDS.items():
        index = _header_column(header, keywords, HEADER_EXCLUDES.get(field, ()), used_columns)
        if index is not None and index < len(row):
            fields[field] = row[index]
            used_columns.add(index)
    return AllotmentDetail(status=status.label, **fields)


def _unwrap_payload(payload: Any) -> Any:
    # ASP.NET wraps results in "d"; REST-style endpoints use "data"
    for _ in range(3):
        if isinstance(payload, Mapping):
            for envelope in ("d", "data", "Data", "result"):
                inner = payload.get(envelope)
                if isinstance(inner, (Mapping, list)):
                    payload = inner
                    break
            else:
                return payload
        elif isinstance(payload, list):
            if not payload:
                return payload
            payload = payload[0]
        else:
            return payload
    return payload


def classify_json_payload(payload: Any) -> StatusKind:
    """
    Classify a JSON registrar response whose schema is not fixed.

    The payload is unwrapped from common envelopes, then scanned for a status
    field under several spellings. A body that is not a JSON object is only
    checked for no-record wording; anything else in it is Unknown.
    """
    if payload is None or payload in ("", {}, []):
        return StatusKind.NO_RECORD_FOUND

    record = _unwrap_payload(payload)
    if record in ("", {}, []):
        return StatusKind.NO_RECORD_FOUND

    if not isinstance(record, Mapping):
        # Unstructured bodies (HTML pages, plain text) never carry a status field
        if mentions_no_record(str(record)):
            return StatusKind.NO_RECORD_FOUND
        return StatusKind.UNKNOWN

    status_text = _first_text(record, JSON_STATUS_KEYS)
    if status_text:
        if mentions_no_record(status_text):
            return StatusKind.NO_RECORD_FOUND
        if "allot" in status_text.lower():
            return classify_allotment_text(status_text)

    allotted = _first_text(record, DETAIL_KEY_ALIASES["shares_allotted"])
    if allotted is not None and parse_share_count(allotted) is not None:
        return classify_allotted_count(allotted)

    if mentions_no_record(_first_text(record, JSON_MESSAGE_KEYS)):
        return StatusKind.NO_RECORD_FOUND
    return StatusKind.UNKNOWN


def json_payload_record(payload: Any) -> Optional[Mapping[str, Any]]:
    """The innermost mapping of a JSON payload, if any."""
    record = _unwrap_payload(payload)
    return record if isinstance(record, Mapping) else None
