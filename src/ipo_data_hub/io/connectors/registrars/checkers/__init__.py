"""
Per-registrar checkers, one class per protocol family.
"""

from .base import RegistrarChecker
from .direct_json import BigshareChecker, JsonStatusChecker, KfintechChecker, LinkIntimeChecker
from .generic import GenericChecker
from .scraped_form import FORM_LAYOUTS, FormLayout, ScrapedFormChecker, challenge_attempts
from .token_session import MufgChecker

__all__ = [
    "RegistrarChecker",
    "BigshareChecker",
    "JsonStatusChecker",
    "KfintechChecker",
    "LinkIntimeChecker",
    "MufgChecker",
    "ScrapedFormChecker",
    "FormLayout",
    "FORM_LAYOUTS",
    "challenge_attempts",
    "GenericChecker",
]
