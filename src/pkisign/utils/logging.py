import hashlib
import logging
import sys

from ..config import load_settings


def get_logger():
    logger = logging.getLogger("pkisign")
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(message)s")
        h.setFormatter(fmt)
        logger.addHandler(h)
        logger.setLevel(load_settings().log_level)
    return logger


def redact(value, keep: int = 6) -> str:
    """Short fingerprint of a sensitive value: prefix, length and digest."""
    if value is None:
        return "<none>"
    text = value if isinstance(value, str) else str(value)
    digest = hashlib.sha256(text.encode()).hexdigest()[:12]
    prefix = text[:keep] + "..." if len(text) > keep else text
    return f"{prefix} (len={len(text)} sha256={digest})"


def trace(label: str, value) -> None:
    """Emit a redacted DEBUG line, only when PKISIGN_DEBUG_TRACE is on.

    Nothing shows unless PKISIGN_LOG_LEVEL is also DEBUG.
    """
    if not load_settings().debug_trace:
        return
    get_logger().debug("trace %s: %s", label, redact(value))
