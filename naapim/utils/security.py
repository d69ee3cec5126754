"""Security helpers: PII masking and safe logging (minimal)."""
import re

EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
LONG_DIGITS_PATTERN = re.compile(r"\b\d{10,}\b")


def mask_pii(text: str) -> str:
    if not text:
        return ""
    masked = EMAIL_PATTERN.sub("[EMAIL]", text)
    masked = LONG_DIGITS_PATTERN.sub("[REDACTED]", masked)
    return masked


def preview(text: str, limit: int = 60) -> str:
    """Masked, shortened form of user text for log lines."""
    masked = mask_pii(text or "")
    return masked if len(masked) <= limit else masked[:limit] + "..."
