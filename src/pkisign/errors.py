"""Error taxonomy for signing and token consumption.

Signing and decryption failures keep their original cause chained
(``raise ... from e``) so local diagnostics can see it. Verification failures
are flattened to one generic message before they leave this package.
"""


class PkiSignError(Exception):
    """Base class for every failure raised by pkisign."""


class KeyLoadError(PkiSignError):
    """Key material could not be read or parsed."""


class SigningError(PkiSignError):
    """Raised when the canonical base string cannot be signed."""


class UnsupportedAuthTypeError(PkiSignError):
    """Raised for an auth type other than the asymmetric-signature scheme."""


class VerificationError(PkiSignError):
    """Generic JWS verification failure; the specific check is never exposed."""


class DecryptionError(PkiSignError):
    """JWE could not be decrypted (tag mismatch, wrong key, malformed part)."""


class PayloadParseError(PkiSignError):
    """Decrypted plaintext is not valid JSON."""
