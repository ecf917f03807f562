"""
Auth signature for the ``auth_sign`` endpoint.

sha256(appkey + timestamp + mastersecret), rendered as lowercase hex.
"""

import hashlib
import time


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def sign(app_key: str, master_secret: str, timestamp_ms: int) -> str:
    raw = f"{app_key}{timestamp_ms}{master_secret}".encode("utf-8")
    return hashlib.sha256(raw).hexdigest()
