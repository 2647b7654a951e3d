"""
Pydantic v2 data models for the IPO allotment domain.

This module defines the data contracts shared by every registrar checker:
1. The closed registrar and status taxonomies
2. Inbound allotment requests with PAN validation
3. Normalized allotment results and the optional applicant detail block

Models expose snake_case attributes and camelCase aliases so that
``model_dump(by_alias=True)`` produces the public wire shape
(``panNumber``, ``rawResponse``, ``sharesApplied`` ...).
"""

import re
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

STRICT_PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
# Secondary validation path (aggregator) accepts a missing trailing letter
RELAXED_PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]?$")
NUMERIC_IDENTIFIER_PATTERN = re.compile(r"^\d+$")


class AllotmentValidationError(ValueError):
    """Raised for malformed input before any registrar is contacted."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class RegistrarId(str, Enum):
    """Closed set of supported registrars, in configuration-table order."""

    BIGSHARE = "bigshare"
    KFINTECH = "kfintech"
    LINKINTIME = "linkintime"
    SKYLINE = "skyline"
    CAMEO = "cameo"
    MAS = "mas"
    MAASHITLA = "maashitla"
    BEETAL = "beetal"
    PURVA = "purva"
    MUFG = "mufg"


class StatusKind(str, Enum):
    """Normalized allotment outcome."""

    ALLOTTED = "Allotted"
    NOT_ALLOTTED = "NotAllotted"
    NO_RECORD_FOUND = "NoRecordFound"
    PENDING = "Pending"
    CAPTCHA_REQUIRED = "CaptchaRequired"
    ERROR = "Error"
    UNKNOWN = "Unknown"
    # Response fetched but interpretation not implemented for the registrar
    PARSE_NEEDED = "ParseNeeded"

    @property
    def label(self) -> str:
        """Lower-case human wording, e.g. ``not allotted``."""
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    StatusKind.ALLOTTED: "allotted",
    StatusKind.NOT_ALLOTTED: "not allotted",
    StatusKind.NO_RECORD_FOUND: "no record found",
    StatusKind.PENDING: "pending",
    StatusKind.CAPTCHA_REQUIRED: "captcha required",
    StatusKind.ERROR: "error",
    StatusKind.UNKNOWN: "unknown",
    StatusKind.PARSE_NEEDED: "parse needed",
}


def is_numeric_identifier(value: str) -> bool:
    """Return True when an IPO identifier is a registrar company code."""
    return bool(NUMERIC_IDENTIFIER_PATTERN.match((value or "").strip()))


def is_valid_pan(pan_number: str, *, relaxed: bool = False) -> bool:
    pattern = RELAXED_PAN_PATTERN if relaxed else STRICT_PAN_PATTERN
    return bool(pattern.match(pan_number or ""))


def validate_pan(pan_number: Any, *, relaxed: bool = False) -> str:
    """
    Validate a PAN and return it stripped of surrounding whitespace.

    Lower-case input is rejected rather than upper-cased.

    Raises:
        AllotmentValidationError: If the PAN is missing or malformed
    """
    if pan_number is None or not str(pan_number).strip():
        raise AllotmentValidationError("panNumber", "PAN number is required")
    cleaned = str(pan_number).strip()
    if not is_valid_pan(cleaned, relaxed=relaxed):
        expected = "ABCDE1234 or ABCDE1234F" if relaxed else "ABCDE1234F"
        raise AllotmentValidationError(
            "panNumber", f"Invalid PAN format {cleaned!r}, expected {expected}"
        )
    return cleaned


def parse_registrar(value: Any) -> RegistrarId:
    """
    Map a raw registrar string onto the closed RegistrarId set.

    Raises:
        AllotmentValidationError: If the value is not a supported registrar
    """
    if isinstance(value, RegistrarId):
        return value
    cleaned = str(value or "").strip().lower()
    try:
        return RegistrarId(cleaned)
    except ValueError:
        supported = ", ".join(r.value for r in RegistrarId)
        raise AllotmentValidationError(
            "registrar", f"Unsupported registrar {value!r}; expected one of: {supported}"
        ) from None


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class AllotmentRequest(_WireModel):
    """Inbound allotment lookup for one PAN and one IPO."""

    pan_number: str = Field(..., description="Applicant PAN (strict format)")
    ipo_identifier: str = Field(
        ..., description="Registrar company code or free-text IPO name"
    )
    registrar: Optional[RegistrarId] = Field(
        default=None, description="Restrict the lookup to one registrar"
    )

    @field_validator("pan_number", mode="before")
    @classmethod
    def _validate_pan(cls, v: Any) -> str:
        return validate_pan(v)

    @field_validator("ipo_identifier", mode="before")
    @classmethod
    def _validate_identifier(cls, v: Any) -> str:
        cleaned = str(v).strip() if v is not None else ""
        if not cleaned:
            raise AllotmentValidationError("ipoIdentifier", "IPO name or code is required")
        return cleaned

    @field_validator("registrar", mode="before")
    @classmethod
    def _validate_registrar(cls, v: Any) -> Optional[RegistrarId]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return parse_registrar(v)

    @property
    def is_numeric(self) -> bool:
        return is_numeric_identifier(self.ipo_identifier)


def build_allotment_request(
    pan_number: Any, ipo_identifier: Any, registrar: Any = None
) -> AllotmentRequest:
    """
    Validate raw inbound values and build an AllotmentRequest.

    Unlike calling the model directly, failures surface as
    AllotmentValidationError rather than pydantic's ValidationError.
    """
    pan = validate_pan(pan_number)
    identifier = str(ipo_identifier).strip() if ipo_identifier is not None else ""
    if not identifier:
        raise AllotmentValidationError("ipoIdentifier", "IPO name or code is required")
    registrar_id = None
    if registrar is not None and str(registrar).strip():
        registrar_id = parse_registrar(registrar)
    return AllotmentRequest(
        pan_number=pan, ipo_identifier=identifier, registrar=registrar_id
    )


class AllotmentDetail(_WireModel):
    """
    Applicant-level enrichment extracted from a registrar response.

    Fields are populated only when the registrar returned them.
    """

    applicant_name: Optional[str] = None
    application_number: Optional[str] = None
    dp_id: Optional[str] = None
    category: Optional[str] = None
    shares_applied: Optional[str] = None
    shares_allotted: Optional[str] = None
    refund_amount: Optional[str] = None
    allotment_status: Optional[str] = Field(
        default=None, description="Registrar's own wording of the outcome"
    )
    status: str = Field(..., description="Lower-case StatusKind label")

    @field_validator(
        "applicant_name",
        "application_number",
        "dp_id",
        "category",
        "shares_applied",
        "shares_allotted",
        "refund_amount",
        "allotment_status",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        cleaned = str(v).strip()
        return cleaned or None


class AllotmentResult(_WireModel):
    """Normalized outcome of querying one registrar for one request."""

    success: bool
    # Plain id string so that results for unrecognised ids can still be reported
    registrar: str
    status: StatusKind
    details: Optional[AllotmentDetail] = None
    raw_response: Any = None
    error: Optional[str] = None
    note: Optional[str] = Field(
        default=None, description="Diagnostic context, e.g. the resolved company code"
    )

    @field_validator("registrar", mode="before")
    @classmethod
    def _registrar_value(cls, v: Any) -> str:
        if isinstance(v, Enum):
            return v.value
        return str(v)

    @classmethod
    def failure(
        cls, registrar: Union[RegistrarId, str], error: str, *, raw_response: Any = None
    ) -> "AllotmentResult":
        return cls(
            success=False,
            registrar=registrar,
            status=StatusKind.ERROR,
            raw_response=raw_response,
            error=error,
        )

    @classmethod
    def captcha_required(
        cls, registrar: Union[RegistrarId, str], *, raw_response: Any = None
    ) -> "AllotmentResult":
        return cls(
            success=False,
            registrar=registrar,
            status=StatusKind.CAPTCHA_REQUIRED,
            raw_response=raw_response,
            error="Registrar requires an interactive captcha challenge",
        )

    def to_public_dict(self) -> dict:
        """Wire representation with camelCase keys and absent fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
