"""Best-effort device discovery over a fixed candidate list."""

import logging

import httpx

from watercurtain.exceptions import ConnectionFailedError, DiscoveryExhaustedError
from watercurtain.models import AppConfig

from .link import Connector, DeviceLink
from .session import DeviceSession

logger = logging.getLogger(__name__)


class DeviceDiscovery:
    """
    Find the device by probing known addresses one at a time.

    An optional hint URL (`discovery_hint_url`) is asked first; the address
    it reports is tried before every other candidate. Phase 1 asks each
    candidate's HTTP endpoint for the device's address and the first valid
    answer wins. Phase 2 falls back to opening (and immediately closing) a
    WebSocket to each candidate. The session's target address is written
    once, on success.
    """

    def __init__(
        self,
        session: DeviceSession,
        config: AppConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        connector: Connector | None = None,
    ):
        """
        Args:
            session: Session whose target address is the hint and the result sink
            config: Candidate list, paths and probe timeouts
            transport: Optional httpx transport (tests pass httpx.MockTransport)
            connector: Optional WebSocket connector for the fallback probes
        """
        self._session = session
        self._config = config
        self._transport = transport
        self._connector = connector

    def candidates(self, hint: str | None = None) -> list[str]:
        """
        Candidate addresses in probe order.

        ``hint`` (an address obtained from ``discovery_hint_url``) comes
        first, then the session's target when it is not the default, then
        the configured list. Duplicates keep their first position.
        """
        ordered = list(self._config.discovery_candidates)
        if not self._session.is_default:
            ordered.insert(0, self._session.target_address)
        if hint:
            ordered.insert(0, hint)
        return list(dict.fromkeys(ordered))

    async def _ask_for_ip(self, client: httpx.AsyncClient, url: str) -> str | None:
        """GET ``url`` and return the ``ip`` it reports, or None."""
        try:
            response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"HTTP probe {url} failed: {type(e).__name__}: {e}")
            return None

        if not response.is_success:
            logger.debug(f"HTTP probe {url} returned {response.status_code}")
            return None

        try:
            data = response.json()
        except ValueError:
            logger.debug(f"HTTP probe {url} returned non-JSON body")
            return None

        ip = data.get("ip") if isinstance(data, dict) else None
        if isinstance(ip, str) and ip.strip():
            return ip.strip()
        return None

    async def _probe_http(self, client: httpx.AsyncClient, candidate: str) -> str | None:
        return await self._ask_for_ip(client, f"http://{candidate}{self._config.discovery_path}")

    async def _probe_ws(self, candidate: str) -> bool:
        # Scratch session: an address report on the probe must not move the real target
        link = DeviceLink(
            DeviceSession(candidate),
            ws_path=self._config.ws_path,
            connect_timeout=self._config.ws_probe_timeout,
            connector=self._connector,
        )
        try:
            return await link.connect(candidate)
        except ConnectionFailedError as e:
            logger.debug(f"WebSocket probe {candidate} failed: {e.technical_message}")
            return False
        finally:
            await link.close()

    async def discover(self) -> str | None:
        """
        Probe candidates sequentially.

        Returns:
            The device address, or None when no candidate answered
        """
        async with httpx.AsyncClient(
            transport=self._transport, timeout=self._config.http_probe_timeout
        ) as client:
            hint = None
            if self._config.discovery_hint_url:
                hint = await self._ask_for_ip(client, self._config.discovery_hint_url)
                if hint:
                    logger.info(f"Hint {self._config.discovery_hint_url} suggests {hint}")

            candidates = self.candidates(hint)
            logger.info(f"Searching for device among {len(candidates)} candidates")

            for candidate in candidates:
                ip = await self._probe_http(client, candidate)
                if ip:
                    logger.info(f"Device at {candidate} reported address {ip}")
                    self._session.update_target(ip, origin="discovery")
                    return ip

        logger.info("No HTTP answer, trying WebSocket fallback")
        for candidate in candidates:
            if await self._probe_ws(candidate):
                logger.info(f"Device answered WebSocket at {candidate}")
                self._session.update_target(candidate, origin="discovery")
                return candidate

        logger.warning("Device discovery found nothing")
        return None

    async def discover_or_raise(self) -> str:
        """Like discover(), but raise DiscoveryExhaustedError when nothing answers."""
        address = await self.discover()
        if address is None:
            raise DiscoveryExhaustedError(self.candidates())
        return address
