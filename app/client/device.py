"""Stable per-installation device identity."""
import logging
import secrets
import string
import time

from app.client.storage import DEVICE_ID_KEY, KeyValueStore

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_local_id() -> str:
    """``<epoch-ms base36>-<random suffix>``; sortable by creation time."""
    return f"{to_base36(time.time_ns() // 1_000_000)}-{secrets.token_hex(4)}"


class DeviceIdentity:
    """Returns the persisted device id, creating it on first use."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def get(self) -> str:
        device_id = self.kv.get(DEVICE_ID_KEY)
        if isinstance(device_id, str) and device_id:
            return device_id

        device_id = f"device-{generate_local_id()}"
        self.kv.set(DEVICE_ID_KEY, device_id)
        logger.info("Generated device id %s", device_id)
        return device_id
