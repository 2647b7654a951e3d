"""
Utility functions for registrar connectors.
"""

from ipo_data_hub.utils.logging import mask_pans_in_text

TOKEN_MARKER = "token="


def sanitize_url_for_logging(url: str) -> str:
    """
    Sanitize URL for logging by masking PAN numbers and dropping tokens.

    Everything after ``token=`` is cut, so query parameters following the
    token are dropped as well.
    """
    if TOKEN_MARKER in url:
        url = url.split(TOKEN_MARKER)[0] + "[TOKEN_SANITIZED]"
    return mask_pans_in_text(url)
