"""Device session: the single mutable target address."""

import logging
from threading import Lock

from watercurtain.models.config import AP_DEFAULT_ADDRESS

logger = logging.getLogger(__name__)


class DeviceSession:
    """
    Owns the address the controller talks to.

    Written by the operator, by discovery (once, on success), or by the
    device's own ``ip_address`` report; read by the link and discovery.
    """

    def __init__(self, target_address: str = AP_DEFAULT_ADDRESS):
        self._lock = Lock()
        self._target_address = target_address.strip()

    @property
    def target_address(self) -> str:
        with self._lock:
            return self._target_address

    @property
    def is_default(self) -> bool:
        """True while the target is still the access-point default."""
        return self.target_address == AP_DEFAULT_ADDRESS

    def update_target(self, address: str, origin: str = "operator") -> bool:
        """
        Point the session at a new address.

        Args:
            address: New target address (surrounding whitespace ignored)
            origin: Who changed it, for the log ("operator", "discovery", "device")

        Returns:
            True if the address changed
        """
        address = address.strip()
        if not address:
            raise ValueError("Device address cannot be empty")

        with self._lock:
            if address == self._target_address:
                return False
            previous = self._target_address
            self._target_address = address

        logger.info(f"Target address {previous} -> {address} (from {origin})")
        return True

    def __repr__(self) -> str:
        return f"DeviceSession(target_address={self.target_address!r})"
