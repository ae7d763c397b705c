import asyncio
import base64
import json

import pytest
from joserfc import jwe
from joserfc.jwk import RSAKey

from src.pkisign.errors import DecryptionError, KeyLoadError, PayloadParseError
from src.pkisign.jose.jwe import CompactEncryptedToken, b64url_decode, decrypt_jwe, decrypt_token

PAYLOAD = {"uinfin": {"value": "S9812381D"}, "name": {"value": "TAN XIAO HUI"}}


def _encrypt(keys, plaintext, alg="RSA-OAEP-256", enc="A256GCM"):
    key = RSAKey.import_key(keys.pk_pem)
    token = jwe.encrypt_compact({"alg": alg, "enc": enc}, plaintext, key, algorithms=[alg, enc])
    return token.split(".")


def _flip(part: str) -> str:
    raw = bytearray(b64url_decode(part))
    raw[0] ^= 0x01
    return base64.urlsafe_b64encode(bytes(raw)).rstrip(b"=").decode()


def run(coro):
    return asyncio.run(coro)


@pytest.mark.parametrize("alg,enc", [
    ("RSA-OAEP-256", "A256GCM"),
    ("RSA-OAEP", "A256GCM"),
    ("RSA-OAEP-256", "A128CBC-HS256"),
])
def test_decrypt_ok(keys, alg, enc):
    parts = _encrypt(keys, json.dumps(PAYLOAD), alg, enc)
    assert run(decrypt_jwe(*parts, keys.sk)) == PAYLOAD


def test_decrypt_with_passphrase(keys):
    parts = _encrypt(keys, json.dumps(PAYLOAD))
    assert run(decrypt_jwe(*parts, keys.sk_encrypted, passphrase=keys.passphrase)) == PAYLOAD


def test_tampered_tag(keys):
    header, ek, iv, ct, tag = _encrypt(keys, json.dumps(PAYLOAD))
    with pytest.raises(DecryptionError):
        run(decrypt_jwe(header, ek, iv, ct, _flip(tag), keys.sk))


def test_tampered_ciphertext(keys):
    header, ek, iv, ct, tag = _encrypt(keys, json.dumps(PAYLOAD))
    with pytest.raises(DecryptionError):
        run(decrypt_jwe(header, ek, iv, _flip(ct), tag, keys.sk))


def test_wrong_private_key(keys, other_keys):
    parts = _encrypt(keys, json.dumps(PAYLOAD))
    with pytest.raises(DecryptionError):
        run(decrypt_jwe(*parts, other_keys.sk))


def test_missing_private_key(keys, tmp_path):
    parts = _encrypt(keys, json.dumps(PAYLOAD))
    with pytest.raises(KeyLoadError):
        run(decrypt_jwe(*parts, str(tmp_path / "absent.pem")))


def test_malformed_protected_header(keys):
    _, ek, iv, ct, tag = _encrypt(keys, json.dumps(PAYLOAD))
    with pytest.raises(DecryptionError):
        run(decrypt_jwe("!!not-base64!!", ek, iv, ct, tag, keys.sk))


def test_non_json_payload(keys):
    parts = _encrypt(keys, b"plain text, not json")
    with pytest.raises(PayloadParseError):
        run(decrypt_jwe(*parts, keys.sk))


def test_algorithm_outside_allow_list(keys, monkeypatch):
    monkeypatch.setenv("PKISIGN_JWE_ALGORITHMS", "RSA-OAEP,A256GCM")
    parts = _encrypt(keys, json.dumps(PAYLOAD), "RSA-OAEP-256", "A256GCM")
    with pytest.raises(DecryptionError):
        run(decrypt_jwe(*parts, keys.sk))


def test_compact_record(keys):
    header, ek, iv, ct, tag = _encrypt(keys, json.dumps(PAYLOAD))
    token = CompactEncryptedToken(protected=header, encrypted_key=ek, iv=iv, ciphertext=ct, tag=tag)
    record = token.to_record()
    assert record["type"] == "compact"
    assert record["header"]["alg"] == "RSA-OAEP-256"
    assert record["header"]["enc"] == "A256GCM"
    assert token.compact() == ".".join([header, ek, iv, ct, tag])


def test_decrypt_token_model(keys):
    header, ek, iv, ct, tag = _encrypt(keys, json.dumps(PAYLOAD))
    token = CompactEncryptedToken(protected=header, encrypted_key=ek, iv=iv, ciphertext=ct, tag=tag)
    assert run(decrypt_token(token, keys.sk)) == PAYLOAD
