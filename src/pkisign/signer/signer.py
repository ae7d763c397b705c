"""Canonical signer producing PKI_SIGN authorization headers.

Flow per call: fresh nonce + timestamp -> base string -> RSA-SHA256 signature
-> header. Nothing is kept between calls except the nonce generator state.
"""
from __future__ import annotations

import time
from enum import Enum
from typing import Any, Callable, Dict, Optional

from ..config import load_settings
from ..crypto.keyloader import load_private_key
from ..crypto.sign import sign_base_string
from ..errors import KeyLoadError, SigningError, UnsupportedAuthTypeError
from ..utils.logging import get_logger, trace
from .base_string import build_base_string
from .header import format_authorization_header
from .models import CanonicalHeaderFields, SignedRequest, SigningRequest
from .nonce import default_nonces

log = get_logger()


def _now_ms() -> int:
    return int(time.time() * 1000)


class CanonicalSigner:
    def __init__(
        self,
        nonces: Callable[[], str] = default_nonces,
        clock: Callable[[], int] = _now_ms,
    ):
        self.nonces = nonces
        self.clock = clock

    def fields_for(self, request: SigningRequest) -> CanonicalHeaderFields:
        return CanonicalHeaderFields(app_id=request.app_id, nonce=self.nonces(), timestamp=self.clock())

    def sign(self, request: SigningRequest) -> SignedRequest:
        fields = self.fields_for(request)
        base = build_base_string(
            method=request.http_method,
            url=request.url,
            params=request.params,
            content_type=request.content_type,
            app_id=fields.app_id,
            nonce=fields.nonce,
            timestamp=fields.timestamp,
        )
        trace("base string", base)

        try:
            key = load_private_key(request.key_path, request.key_passphrase)
            signature = sign_base_string(base, key)
        except KeyLoadError as e:
            log.error("signing failed for app_id=%s: %r", request.app_id, e)
            raise SigningError(str(e)) from e
        except Exception as e:
            log.error("signing failed for app_id=%s: %r", request.app_id, e)
            raise SigningError("RSA-SHA256 signing failed") from e
        trace("signature", signature)

        header = format_authorization_header(fields.timestamp, fields.nonce, fields.app_id, signature)
        return SignedRequest(header_fields=fields, base_string=base, signature=signature, header=header)

    def authorization_header(self, request: SigningRequest) -> str:
        return self.sign(request).header


default_signer = CanonicalSigner()


class AuthType(Enum):
    RSA_SIGNATURE = "L2"
    UNSUPPORTED = "unsupported"

    @classmethod
    def parse(cls, value) -> "AuthType":
        if isinstance(value, AuthType):
            return value
        if value == cls.RSA_SIGNATURE.value:
            return cls.RSA_SIGNATURE
        return cls.UNSUPPORTED


def generate_authorization_header(
    url: str,
    params: Optional[Dict[str, Any]],
    method: str,
    content_type: Optional[str],
    auth_type,
    app_id: str,
    key_cert_path: str,
    passphrase: Optional[str] = None,
    signer: Optional[CanonicalSigner] = None,
) -> str:
    """Build the Authorization header value for an outbound request.

    Only ``L2`` (RSA signature) is implemented. Any other auth type raises
    UnsupportedAuthTypeError unless PKISIGN_ALLOW_EMPTY_AUTH_HEADER is set,
    in which case the legacy empty header is returned.
    """
    kind = AuthType.parse(auth_type)
    if kind is AuthType.UNSUPPORTED:
        if load_settings().allow_empty_auth_header:
            log.warning("auth type %r not supported, sending empty Authorization header", auth_type)
            return ""
        raise UnsupportedAuthTypeError(f"unsupported auth type: {auth_type!r}")

    request = SigningRequest(
        url=url,
        params=params or {},
        http_method=method,
        content_type=content_type,
        app_id=app_id,
        key_path=key_cert_path,
        key_passphrase=passphrase,
    )
    return (signer or default_signer).authorization_header(request)


__all__ = ["CanonicalSigner", "default_signer", "AuthType", "generate_authorization_header"]
