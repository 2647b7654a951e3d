"""Configuration management for IPO Data Hub.

Usage:
    >>> from ipo_data_hub.config import get_settings, load_registrar_profiles
    >>> settings = get_settings()
    >>> profiles = load_registrar_profiles(settings.registrar_overrides_file)
"""

from ipo_data_hub.config.registrars import (
    RegistrarConfigError,
    RegistrarProfile,
    load_registrar_profiles,
)
from ipo_data_hub.config.settings import Settings, get_settings

__all__ = [
    "RegistrarConfigError",
    "RegistrarProfile",
    "Settings",
    "get_settings",
    "load_registrar_profiles",
]
