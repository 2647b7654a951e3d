"""
Registrar listing sources.

A listing source fetches the set of companies a registrar currently offers and
yields them as ListingCandidate lists. Each registrar exposes its listing
differently; the resolver only sees candidate sets and runs them all through
the same matching ladder.

Sources are generators so that later URLs/selectors are only fetched when the
earlier candidate sets produced no match.
"""

from __future__ import annotations

from typing import Iterator, List, Protocol, Sequence, runtime_checkable

from ipo_data_hub.io.connectors.registrars.models import RegistrarTransportError
from ipo_data_hub.io.connectors.registrars.parsers import (
    parse_mufg_company_listing,
    parse_select_options,
)
from ipo_data_hub.io.connectors.registrars.transport import RegistrarTransport
from ipo_data_hub.utils.logging import get_logger

from .matching import ListingCandidate

logger = get_logger(__name__)

BIGSHARE_LISTING_PATHS = ("/", "/Default.aspx")
BIGSHARE_LISTING_URLS = tuple(
    f"https://ipo.bigshareonline.com{path}" for path in BIGSHARE_LISTING_PATHS
)

BIGSHARE_OPTION_SELECTORS = (
    "select#ddlCompany option",
    'select[name="ddlCompany"] option',
    'select[id*="Company"] option',
    'select[name*="Company"] option',
    "select option[value]",
)

MUFG_LISTING_ENDPOINT = "/Initial_Offer/IPO.aspx/GetDetails"


def listing_urls(base_url: str, paths: Sequence[str] = BIGSHARE_LISTING_PATHS) -> List[str]:
    return [f"{base_url.rstrip('/')}{path}" for path in paths]


@runtime_checkable
class ListingSource(Protocol):
    """Anything that can enumerate a registrar's company listing."""

    def iter_candidate_sets(self) -> Iterator[List[ListingCandidate]]: ...


class SelectOptionsSource:
    """
    Company ``<select>`` options scraped from one of several listing pages.

    URLs are tried in order; a transport failure on one URL moves on to the
    next. Within a page, each CSS selector that matches non-placeholder
    options yields one candidate set.
    """

    def __init__(
        self,
        transport: RegistrarTransport,
        urls: Sequence[str] = BIGSHARE_LISTING_URLS,
        selectors: Sequence[str] = BIGSHARE_OPTION_SELECTORS,
    ):
        self.transport = transport
        self.urls = tuple(urls)
        self.selectors = tuple(selectors)

    def iter_candidate_sets(self) -> Iterator[List[ListingCandidate]]:
        for url in self.urls:
            try:
                html = self.transport.get(
                    url, headers={"Accept": "text/html,application/xhtml+xml,*/*;q=0.8"}
                ).text
            except RegistrarTransportError as e:
                logger.warning("listing_source.fetch_failed", url=url, error=str(e))
                continue

            for options in parse_select_options(html, self.selectors):
                logger.debug("listing_source.options_found", url=url, count=len(options))
                yield [ListingCandidate(label, value) for label, value in options]


class MufgCompanyListSource:
    """
    MUFG ``GetDetails`` page method.

    The JSON ``d`` member holds an entity-escaped XML fragment of ``<Table>``
    rows with ``companyname``/``company_id`` children.
    """

    def __init__(self, transport: RegistrarTransport, base_url: str):
        self.transport = transport
        self.url = f"{base_url.rstrip('/')}{MUFG_LISTING_ENDPOINT}"

    def iter_candidate_sets(self) -> Iterator[List[ListingCandidate]]:
        try:
            response = self.transport.post(
                self.url,
                json={},
                headers={"Content-Type": "application/json; charset=utf-8"},
            )
            payload = response.json()
        except RegistrarTransportError as e:
            logger.warning("listing_source.fetch_failed", url=self.url, error=str(e))
            return
        except ValueError as e:
            logger.warning("listing_source.invalid_json", url=self.url, error=str(e))
            return

        markup = payload.get("d") if isinstance(payload, dict) else None
        if not markup or not isinstance(markup, str):
            logger.warning("listing_source.empty_listing", url=self.url)
            return

        listing = parse_mufg_company_listing(markup)
        if listing:
            yield [ListingCandidate(name, company_id) for name, company_id in listing]
