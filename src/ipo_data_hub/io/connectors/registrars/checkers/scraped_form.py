"""
Scraped-form checkers for server-rendered registrar sites.

Every site follows the same flow, so the differences are captured as data in
a FormLayout per registrar:

1. GET the form in a fresh cookie session and capture all hidden inputs
2. Pick the company ``<option>`` (numeric codes pass through)
3. POST the form, retrying with each challenge fallback value in order
4. Classify the result table
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import requests

from ipo_data_hub.config.registrars import RegistrarProfile
from ipo_data_hub.domain.allotment.classification import (
    classify_result_rows,
    detail_from_table_row,
)
from ipo_data_hub.domain.allotment.models import (
    AllotmentResult,
    RegistrarId,
    StatusKind,
    is_numeric_identifier,
)
from ipo_data_hub.utils.logging import get_logger

from ..models import ChallengeRequired
from ..parsers import (
    detect_challenge,
    extract_hidden_fields,
    extract_result_rows,
    page_reports_no_record,
    parse_select_options,
)
from ..transport import RegistrarTransport
from .base import RegistrarChecker

logger = get_logger(__name__)

FORM_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


@dataclass(frozen=True)
class FormLayout:
    """Field names and selectors of one registrar's allotment form."""

    company_field: str
    pan_field: str
    form_path: Optional[str] = None
    submit_path: Optional[str] = None
    company_selectors: Tuple[str, ...] = ("select option",)
    extra_fields: Tuple[Tuple[str, str], ...] = ()
    challenge_field: Optional[str] = None
    challenge_fallbacks: Tuple[str, ...] = ()
    result_selectors: Tuple[str, ...] = ("table",)


FORM_LAYOUTS: Dict[RegistrarId, FormLayout] = {
    RegistrarId.SKYLINE: FormLayout(
        company_field="company_id",
        pan_field="pan",
        company_selectors=('select[name="company_id"] option', "select option"),
        extra_fields=(("app_type", "PAN"),),
        result_selectors=("table.result", "div.resultsec table", "table"),
    ),
    RegistrarId.CAMEO: FormLayout(
        company_field="drpCompany",
        pan_field="txtpan",
        company_selectors=("select#drpCompany option", 'select[name="drpCompany"] option'),
        extra_fields=(("ddlUserTypes", "PAN NO"), ("btngenerate", "Submit")),
        challenge_field="txt_captcha",
        challenge_fallbacks=("", "0000", "1234"),
        result_selectors=("table#GridView1", "table[id*='Grid']"),
    ),
    RegistrarId.MAS: FormLayout(
        company_field="ctl00$ContentPlaceHolder1$ddlCompany",
        pan_field="ctl00$ContentPlaceHolder1$txtPan",
        company_selectors=("select[id*='ddlCompany'] option", "select option"),
        extra_fields=(
            ("__EVENTTARGET", ""),
            ("__EVENTARGUMENT", ""),
            ("ctl00$ContentPlaceHolder1$btnSearch", "Search"),
        ),
        result_selectors=("table[id*='GridView']", "table[id*='grd']"),
    ),
    RegistrarId.PURVA: FormLayout(
        company_field="company_id",
        pan_field="pan_no",
        company_selectors=('select[name="company_id"] option', "select option"),
        extra_fields=(("submit", "Search"),),
        result_selectors=("table.table", "table"),
    ),
}


def challenge_attempts(layout: FormLayout) -> List[Dict[str, str]]:
    """
    Ordered extra form fields to try, one dict per POST.

    The first attempt never fills the challenge field; each fallback value is
    then tried in turn.
    """
    attempts: List[Dict[str, str]] = [{}]
    if layout.challenge_field:
        attempts.extend({layout.challenge_field: value} for value in layout.challenge_fallbacks)
    return attempts


def select_company_option(options: List[Tuple[str, str]], ipo_identifier: str) -> Optional[str]:
    """Exact label match first, then substring containment either way."""
    wanted = ipo_identifier.strip().lower()
    if not wanted:
        return None
    for label, value in options:
        if label.strip().lower() == wanted:
            return value
    for label, value in options:
        cleaned = label.strip().lower()
        if cleaned and (wanted in cleaned or cleaned in wanted):
            return value
    return None


class ScrapedFormChecker(RegistrarChecker):
    def __init__(
        self,
        profile: RegistrarProfile,
        transport: RegistrarTransport,
        layout: Optional[FormLayout] = None,
    ):
        super().__init__(profile, transport)
        self.layout = layout or FORM_LAYOUTS[profile.registrar_id]

    def _url(self, path: Optional[str]) -> str:
        if not path:
            return self.profile.url
        return f"{self.profile.base_url.rstrip('/')}/{path.lstrip('/')}"

    @property
    def form_url(self) -> str:
        return self._url(self.layout.form_path)

    @property
    def submit_url(self) -> str:
        return self._url(self.layout.submit_path or self.layout.form_path)

    def _company_value(self, form_html: str, ipo_identifier: str) -> Optional[str]:
        if is_numeric_identifier(ipo_identifier):
            return ipo_identifier
        for options in parse_select_options(form_html, self.layout.company_selectors):
            value = select_company_option(options, ipo_identifier)
            if value:
                return value
        return None

    def _is_challenge(self, html: str) -> bool:
        return extract_result_rows(html, self.layout.result_selectors) is None and detect_challenge(
            html
        )

    def _submit(self, session: requests.Session, body: Dict[str, str]) -> str:
        html = ""
        for attempt_number, extra in enumerate(challenge_attempts(self.layout), start=1):
            response = self.transport.post(
                self.submit_url,
                data={**body, **extra},
                headers={**FORM_HEADERS, "Referer": self.form_url},
                session=session,
            )
            html = response.text
            if not self._is_challenge(html):
                return html
            logger.info(
                "allotment.challenge_rejected",
                registrar=self.registrar_id.value,
                attempt=attempt_number,
            )
        raise ChallengeRequired(
            f"{self.profile.name} requires an interactive challenge", raw_response=html
        )

    def _check(self, pan_number: str, ipo_identifier: str) -> AllotmentResult:
        session = self.transport.open_session()
        try:
            form_html = self.transport.get(
                self.form_url, headers={"Accept": FORM_HEADERS["Accept"]}, session=session
            ).text
            hidden_fields = extract_hidden_fields(form_html)

            company_value = self._company_value(form_html, ipo_identifier)
            if company_value is None:
                return AllotmentResult.failure(
                    self.registrar_id, f"No company found for IPO name: {ipo_identifier}"
                )

            body = {
                **hidden_fields,
                **dict(self.layout.extra_fields),
                self.layout.company_field: company_value,
                self.layout.pan_field: pan_number,
            }
            try:
                html = self._submit(session, body)
            except ChallengeRequired as e:
                return AllotmentResult.captcha_required(
                    self.registrar_id, raw_response=e.raw_response
                )
        finally:
            session.close()

        rows = extract_result_rows(html, self.layout.result_selectors)
        status = classify_result_rows(rows, page_reports_no_record=page_reports_no_record(html))

        details = None
        if rows and len(rows) > 1 and status in (StatusKind.ALLOTTED, StatusKind.NOT_ALLOTTED):
            details = detail_from_table_row(rows[0], rows[1], status)

        note = None
        if company_value != ipo_identifier:
            note = f"Used company ID: {company_value}"
        return self._result(status, details=details, raw_response=html, note=note)
