"""Logging filters that scrub redeemable codes from log output."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"\b((?:coupon|gift_cart_code)\"?\s*[:=]\s*\"?)([\w-]+)",
    re.IGNORECASE,
)


def redact(message: str) -> str:
    """Mask coupon and gift card codes embedded in ``message``."""
    return _SENSITIVE_PATTERN.sub(r"\1**REDACTED**", message)


class SensitiveFilter(logging.Filter):
    """Replace coupon and gift card codes in log messages with a marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(
                redact(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True


__all__ = ["SensitiveFilter", "redact"]
