"""Boundary operations: sign outbound requests, consume partner tokens."""
from .jose.jwe import decrypt_jwe
from .jose.jws import verify_jws
from .signer.signer import AuthType, generate_authorization_header

__all__ = ["AuthType", "generate_authorization_header", "verify_jws", "decrypt_jwe"]
