import datetime
from types import SimpleNamespace

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

PASSPHRASE = "correct horse"


def _write(path, data: bytes) -> str:
    path.write_bytes(data)
    return str(path)


def _self_signed(key, cn: str) -> bytes:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, cn)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM)


def _keyset(directory, name: str):
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    sk_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    sk_enc_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.BestAvailableEncryption(PASSPHRASE.encode()),
    )
    pk_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    cert_pem = _self_signed(key, name)
    return SimpleNamespace(
        key=key,
        sk_pem=sk_pem,
        pk_pem=pk_pem,
        sk=_write(directory / f"{name}_sk.pem", sk_pem),
        sk_encrypted=_write(directory / f"{name}_sk_enc.pem", sk_enc_pem),
        pk=_write(directory / f"{name}_pk.pem", pk_pem),
        cert=_write(directory / f"{name}_cert.pem", cert_pem),
        cert_and_key=_write(directory / f"{name}_bundle.pem", cert_pem + sk_pem),
        passphrase=PASSPHRASE,
    )


@pytest.fixture(scope="session")
def keys(tmp_path_factory):
    return _keyset(tmp_path_factory.mktemp("keys"), "client")


@pytest.fixture(scope="session")
def other_keys(tmp_path_factory):
    return _keyset(tmp_path_factory.mktemp("other-keys"), "other")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "PKISIGN_DEBUG_TRACE",
        "PKISIGN_ALLOW_EMPTY_AUTH_HEADER",
        "PKISIGN_JWE_ALGORITHMS",
        "PKISIGN_JWS_LEEWAY",
    ):
        monkeypatch.delenv(var, raising=False)
