from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SigningRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    params: Dict[str, Any] = Field(default_factory=dict)
    http_method: str = "GET"
    content_type: Optional[str] = None
    app_id: str
    key_path: str
    key_passphrase: Optional[str] = None

    @field_validator("http_method")
    @classmethod
    def _upper_method(cls, v: str) -> str:
        return v.upper()


class CanonicalHeaderFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    app_id: str
    nonce: str
    signature_method: Literal["RS256"] = "RS256"
    timestamp: int


class SignedRequest(BaseModel):
    header_fields: CanonicalHeaderFields
    base_string: str
    signature: str
    header: str
