import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()

DEFAULT_JWE_ALGORITHMS = (
    "RSA-OAEP,RSA-OAEP-256,"
    "A128GCM,A192GCM,A256GCM,"
    "A128CBC-HS256,A192CBC-HS384,A256CBC-HS512"
)


@dataclass(frozen=True)
class Settings:
    log_level: str
    debug_trace: bool
    allow_empty_auth_header: bool
    jwe_algorithms: Tuple[str, ...]
    jws_leeway: int


def _csv(value: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in value.split(",") if p.strip())


def load_settings() -> Settings:
    """Read settings from the environment on every call.

    Tests monkeypatch the environment, so nothing here is cached.
    """
    return Settings(
        log_level=os.getenv("PKISIGN_LOG_LEVEL", "INFO").upper(),
        debug_trace=os.getenv("PKISIGN_DEBUG_TRACE", "false").lower() == "true",
        # Legacy callers expect "" for auth types other than L2
        allow_empty_auth_header=os.getenv("PKISIGN_ALLOW_EMPTY_AUTH_HEADER", "false").lower() == "true",
        jwe_algorithms=_csv(os.getenv("PKISIGN_JWE_ALGORITHMS", DEFAULT_JWE_ALGORITHMS)),
        jws_leeway=int(os.getenv("PKISIGN_JWS_LEEWAY", "0")),
    )
