"""Verification of compact JWS tokens returned by the partner API."""
from __future__ import annotations

from typing import Any, Dict, Optional

import jwt

from ..config import load_settings
from ..crypto.keyloader import load_public_key
from ..errors import VerificationError
from ..utils.logging import get_logger, trace

log = get_logger()

ALGORITHMS = ["RS256"]
GENERIC_MESSAGE = "Error with verifying and decoding JWS"


def verify_jws(
    token: str,
    public_key_path: str,
    *,
    audience: Optional[str] = None,
    issuer: Optional[str] = None,
    leeway: Optional[int] = None,
) -> Dict[str, Any]:
    """Verify an RS256 JWS and return its claims.

    nbf and iat are not enforced: partner clocks run slightly ahead and fresh
    tokens were rejected. exp follows PyJWT defaults. aud/iss are only
    checked when the caller supplies them.
    """
    trace("jws", token)
    if leeway is None:
        leeway = load_settings().jws_leeway
    # iat is usually equal to nbf, so it gets the same relaxation
    options = {"verify_nbf": False, "verify_iat": False, "verify_aud": audience is not None}
    try:
        key = load_public_key(public_key_path)
        return jwt.decode(
            token,
            key,
            algorithms=ALGORITHMS,
            options=options,
            audience=audience,
            issuer=issuer,
            leeway=leeway,
        )
    except Exception as e:
        # full cause stays in the local log only
        log.error("%s: %r", GENERIC_MESSAGE, e)
        raise VerificationError(GENERIC_MESSAGE) from None


__all__ = ["verify_jws", "ALGORITHMS"]
