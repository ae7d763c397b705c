"""PEM key loading for signing, verification and decryption.

Key material is read fresh on every call so a rotated key file is picked up
immediately.
"""
from __future__ import annotations

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..errors import KeyLoadError


def read_key_file(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise KeyLoadError(f"cannot read key file {path!r}") from e


def _password(passphrase: str | None) -> bytes | None:
    # An empty passphrase means an unencrypted key
    if not passphrase:
        return None
    return passphrase.encode()


def load_private_key(path: str, passphrase: str | None = None) -> rsa.RSAPrivateKey:
    """Load an RSA private key from a PEM file.

    The file may also carry the X.509 certificate issued for the key; only
    the private key block is used.
    """
    data = read_key_file(path)
    try:
        key = serialization.load_pem_private_key(data, password=_password(passphrase))
    except (ValueError, TypeError) as e:
        # TypeError: encrypted key without passphrase or the reverse
        raise KeyLoadError(f"cannot load private key from {path!r}: {e}") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyLoadError(f"private key in {path!r} is not an RSA key")
    return key


def private_key_pem(key: rsa.RSAPrivateKey) -> bytes:
    """Unencrypted PKCS#8 PEM, the form the JOSE layer imports."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def load_public_key(path: str) -> rsa.RSAPublicKey:
    data = read_key_file(path)
    try:
        if b"BEGIN CERTIFICATE" in data:
            key = x509.load_pem_x509_certificate(data).public_key()
        else:
            key = serialization.load_pem_public_key(data)
    except ValueError as e:
        raise KeyLoadError(f"cannot load public key from {path!r}: {e}") from e
    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyLoadError(f"public key in {path!r} is not an RSA key")
    return key


def public_key_pem(key: rsa.RSAPublicKey) -> bytes:
    return key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


__all__ = [
    "read_key_file",
    "load_private_key",
    "private_key_pem",
    "load_public_key",
    "public_key_pem",
]
