"""Decryption of compact JWE tokens delivered as five separate parts.

The partner hands over header, encrypted key, iv, ciphertext and tag as
individual fields. They are reassembled into one compact token and handed
to joserfc with an explicit algorithm allow-list.
"""
from __future__ import annotations

import asyncio
import base64
import binascii
import json
from typing import Any, Dict, Optional, Sequence

from joserfc import jwe
from joserfc.jwk import RSAKey
from pydantic import BaseModel, ConfigDict

from ..config import load_settings
from ..crypto.keyloader import load_private_key, private_key_pem
from ..errors import DecryptionError, KeyLoadError, PayloadParseError
from ..utils.logging import get_logger, trace

log = get_logger()


def b64url_decode(value: str) -> bytes:
    # compact serialization strips '=' padding
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


class CompactEncryptedToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    protected: str
    encrypted_key: str
    iv: str
    ciphertext: str
    tag: str

    def parse_protected_header(self) -> Dict[str, Any]:
        try:
            header = json.loads(b64url_decode(self.protected))
        except (binascii.Error, UnicodeError, ValueError) as e:
            raise DecryptionError("protected header is not base64url JSON") from e
        if not isinstance(header, dict):
            raise DecryptionError("protected header is not a JSON object")
        return header

    def compact(self) -> str:
        return ".".join((self.protected, self.encrypted_key, self.iv, self.ciphertext, self.tag))

    def to_record(self) -> Dict[str, Any]:
        return {
            "type": "compact",
            "ciphertext": self.ciphertext,
            "protected": self.protected,
            "encrypted_key": self.encrypted_key,
            "tag": self.tag,
            "iv": self.iv,
            "header": self.parse_protected_header(),
        }


def _decrypt_compact(token: CompactEncryptedToken, key: RSAKey, algorithms: Sequence[str]) -> bytes:
    obj = jwe.decrypt_compact(token.compact(), key, algorithms=list(algorithms))
    if obj.plaintext is None:
        raise DecryptionError("decryption produced no plaintext")
    return obj.plaintext


def parse_payload(plaintext: bytes) -> Any:
    try:
        return json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        log.error("Error with decrypting JWE: payload is not JSON: %r", e)
        raise PayloadParseError("decrypted payload is not valid JSON") from e


async def decrypt_token(
    token: CompactEncryptedToken,
    private_key_path: str,
    passphrase: Optional[str] = None,
) -> Any:
    for part in ("protected", "encrypted_key", "iv", "ciphertext", "tag"):
        trace(f"jwe {part}", getattr(token, part))

    try:
        rsa_key = load_private_key(private_key_path, passphrase)
        key = RSAKey.import_key(private_key_pem(rsa_key))
    except KeyLoadError as e:
        log.error("Error with decrypting JWE: %r", e)
        raise
    except Exception as e:
        log.error("Error with decrypting JWE: %r", e)
        raise KeyLoadError(f"cannot import private key from {private_key_path!r}") from e

    try:
        record = token.to_record()
        trace("jwe header", json.dumps(record["header"], sort_keys=True))
        plaintext = await asyncio.to_thread(_decrypt_compact, token, key, load_settings().jwe_algorithms)
    except DecryptionError as e:
        log.error("Error with decrypting JWE: %r", e)
        raise
    except Exception as e:
        log.error("Error with decrypting JWE: %r", e)
        raise DecryptionError("Error with decrypting JWE") from e

    return parse_payload(plaintext)


async def decrypt_jwe(
    protected_header: str,
    encrypted_key: str,
    iv: str,
    cipher_text: str,
    tag: str,
    private_key_path: str,
    passphrase: Optional[str] = None,
) -> Any:
    token = CompactEncryptedToken(
        protected=protected_header,
        encrypted_key=encrypted_key,
        iv=iv,
        ciphertext=cipher_text,
        tag=tag,
    )
    return await decrypt_token(token, private_key_path, passphrase)


__all__ = ["CompactEncryptedToken", "b64url_decode", "parse_payload", "decrypt_token", "decrypt_jwe"]
