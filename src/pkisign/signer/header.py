"""PKI_SIGN authorization header assembly and parsing."""
import re
from typing import Dict

from ..errors import PkiSignError

SCHEME = "PKI_SIGN"
FIELD_ORDER = ("timestamp", "nonce", "app_id", "signature_method", "signature")

_FIELD_RE = re.compile(r'([a-z_]+)="([^"]*)"')


def format_authorization_header(timestamp: int, nonce: str, app_id: str, signature: str) -> str:
    return (
        f'{SCHEME} timestamp="{timestamp}",nonce="{nonce}",app_id="{app_id}",'
        f'signature_method="RS256",signature="{signature}"'
    )


def parse_authorization_header(header: str) -> Dict[str, str]:
    """Split a PKI_SIGN header back into its fields.

    Raises PkiSignError when the scheme is wrong or a field is missing.
    """
    scheme, _, rest = header.strip().partition(" ")
    if scheme != SCHEME:
        raise PkiSignError(f"not a {SCHEME} header")
    fields = dict(_FIELD_RE.findall(rest))
    missing = [f for f in FIELD_ORDER if f not in fields]
    if missing:
        raise PkiSignError(f"{SCHEME} header missing fields: {', '.join(missing)}")
    return fields


__all__ = ["SCHEME", "format_authorization_header", "parse_authorization_header"]
