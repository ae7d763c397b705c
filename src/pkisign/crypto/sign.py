"""RSA-SHA256 signing of canonical base strings."""
from __future__ import annotations

import base64

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa


def sign_base_string(base_string: str, private_key: rsa.RSAPrivateKey) -> str:
    # PKCS#1 v1.5 over SHA-256, base64 (standard alphabet, padded)
    sig = private_key.sign(base_string.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256())
    return base64.b64encode(sig).decode()


__all__ = ["sign_base_string"]
