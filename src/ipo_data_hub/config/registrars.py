"""
Registrar profile table.

One RegistrarProfile per RegistrarId, built once at startup from the defaults
below plus optional YAML overrides, and read-only afterwards. Registrar sites
move their endpoints without notice, so base URLs, endpoints and methods are
overridable without touching checker code.

Override file format (``config/registrars.yml``)::

    mufg:
      base_url: https://in.mpms.mufg.com
      endpoint: /Initial_Offer/IPO.aspx/SearchOnPan
    skyline:
      method: POST
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Literal, Mapping, Optional, Union

import structlog
import yaml

from ipo_data_hub.domain.allotment.models import RegistrarId

logger = structlog.get_logger(__name__)

OVERRIDABLE_FIELDS = ("name", "base_url", "method", "endpoint")


class RegistrarConfigError(Exception):
    """Raised when the registrar override file is unreadable or invalid."""


@dataclass(frozen=True)
class RegistrarProfile:
    """Static configuration of one registrar site."""

    registrar_id: RegistrarId
    name: str
    base_url: str
    method: Literal["GET", "POST"]
    endpoint: str
    response_kind: Literal["json", "html"]
    requires_company_code: bool = False

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.endpoint.lstrip('/')}"

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.registrar_id.value,
            "name": self.name,
            "baseUrl": self.base_url,
            "method": self.method,
            "endpoint": self.endpoint,
            "responseType": self.response_kind,
            "requiresCompanyCode": self.requires_company_code,
        }


DEFAULT_PROFILES: Dict[RegistrarId, RegistrarProfile] = {
    RegistrarId.BIGSHARE: RegistrarProfile(
        registrar_id=RegistrarId.BIGSHARE,
        name="Bigshare Services",
        base_url="https://ipo.bigshareonline.com",
        method="POST",
        endpoint="/Data.aspx/FetchIpodetails",
        response_kind="json",
        requires_company_code=True,
    ),
    RegistrarId.KFINTECH: RegistrarProfile(
        registrar_id=RegistrarId.KFINTECH,
        name="KFintech",
        base_url="https://ris.kfintech.com",
        method="POST",
        endpoint="/ipostatus/api/ipoapplicationstatus",
        response_kind="json",
    ),
    RegistrarId.LINKINTIME: RegistrarProfile(
        registrar_id=RegistrarId.LINKINTIME,
        name="Link Intime",
        base_url="https://ipoallotment.linkintime.co.in",
        method="POST",
        endpoint="/public-issues/ipostatus",
        response_kind="json",
    ),
    RegistrarId.SKYLINE: RegistrarProfile(
        registrar_id=RegistrarId.SKYLINE,
        name="Skyline Financial Services",
        base_url="https://www.skylinerta.com",
        method="GET",
        endpoint="/ipo.php",
        response_kind="html",
    ),
    RegistrarId.CAMEO: RegistrarProfile(
        registrar_id=RegistrarId.CAMEO,
        name="Cameo Corporate Services",
        base_url="https://www.cameoindia.com",
        method="GET",
        endpoint="/iporesult.html",
        response_kind="html",
    ),
    RegistrarId.MAS: RegistrarProfile(
        registrar_id=RegistrarId.MAS,
        name="MAS Services",
        base_url="https://maservices.biz",
        method="GET",
        endpoint="/ApplicationStatus.aspx",
        response_kind="html",
    ),
    RegistrarId.MAASHITLA: RegistrarProfile(
        registrar_id=RegistrarId.MAASHITLA,
        name="Maashitla Securities",
        base_url="https://www.maashitla.com",
        method="GET",
        endpoint="/PublicIssues/Search",
        response_kind="html",
    ),
    RegistrarId.BEETAL: RegistrarProfile(
        registrar_id=RegistrarId.BEETAL,
        name="Beetal Financial & Computer Services",
        base_url="https://www.beetalfinancial.com",
        method="GET",
        endpoint="/",
        response_kind="html",
    ),
    RegistrarId.PURVA: RegistrarProfile(
        registrar_id=RegistrarId.PURVA,
        name="Purva Sharegistry",
        base_url="https://www.purvashare.com",
        method="GET",
        endpoint="/results.html",
        response_kind="html",
    ),
    RegistrarId.MUFG: RegistrarProfile(
        registrar_id=RegistrarId.MUFG,
        name="MUFG Intime India Private Limited",
        base_url="https://in.mpms.mufg.com",
        method="POST",
        endpoint="/Initial_Offer/IPO.aspx/SearchOnPan",
        response_kind="json",
        requires_company_code=True,
    ),
}


def _load_override_file(file_path: Path) -> Dict[str, Dict[str, str]]:
    """
    Load the YAML override file.

    Behavior:
    - Missing file: Returns empty dict (overrides are optional)
    - Empty file: Returns empty dict
    - Invalid YAML or non-mapping content: Raises RegistrarConfigError
    """
    if not file_path.exists():
        logger.debug("registrars.override_file_missing", path=str(file_path))
        return {}

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("registrars.override_yaml_error", path=str(file_path), error=str(e))
        raise RegistrarConfigError(f"Invalid YAML in {file_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RegistrarConfigError(
            f"{file_path} must contain a mapping of registrar id to overrides"
        )
    return data


def apply_overrides(
    profiles: Mapping[RegistrarId, RegistrarProfile],
    overrides: Mapping[str, Mapping[str, str]],
) -> Dict[RegistrarId, RegistrarProfile]:
    """
    Return a new profile table with per-registrar field overrides applied.

    Raises:
        RegistrarConfigError: On unknown registrar ids, unknown fields or
            unsupported HTTP methods
    """
    result = dict(profiles)
    for raw_id, fields in overrides.items():
        try:
            registrar_id = RegistrarId(str(raw_id).strip().lower())
        except ValueError:
            raise RegistrarConfigError(f"Unknown registrar in overrides: {raw_id!r}") from None

        if not isinstance(fields, Mapping):
            raise RegistrarConfigError(f"Overrides for {raw_id!r} must be a mapping")

        unknown = set(fields) - set(OVERRIDABLE_FIELDS)
        if unknown:
            raise RegistrarConfigError(
                f"Unsupported override fields for {raw_id!r}: {sorted(unknown)}"
            )

        changes = {key: str(value).strip() for key, value in fields.items()}
        if "method" in changes:
            changes["method"] = changes["method"].upper()
            if changes["method"] not in ("GET", "POST"):
                raise RegistrarConfigError(
                    f"Unsupported method for {raw_id!r}: {changes['method']}"
                )
        result[registrar_id] = replace(result[registrar_id], **changes)
        logger.info(
            "registrars.override_applied",
            registrar=registrar_id.value,
            fields=sorted(changes),
        )
    return result


def load_registrar_profiles(
    overrides_file: Optional[Union[str, Path]] = None,
) -> Dict[RegistrarId, RegistrarProfile]:
    """
    Build the process-wide profile table in RegistrarId order.

    Args:
        overrides_file: Optional YAML override file path

    Returns:
        Dict of RegistrarId -> RegistrarProfile, iteration order fixed
    """
    profiles = {registrar_id: DEFAULT_PROFILES[registrar_id] for registrar_id in RegistrarId}
    if overrides_file:
        overrides = _load_override_file(Path(overrides_file))
        if overrides:
            profiles = apply_overrides(profiles, overrides)
    return {registrar_id: profiles[registrar_id] for registrar_id in RegistrarId}
