"""Pick the device a play command should target."""
import logging
from typing import Iterable, List, Optional, Tuple

from spotwrap.core.errors import SpotwrapError, SupersededRequest
from spotwrap.models.device import Device

logger = logging.getLogger(__name__)

LISTING = "listing"
PLAYBACK = "playback"


def select_device(devices: Iterable[Device]) -> Optional[Device]:
    """First active usable device, else first usable device, else None.

    Usable = not restricted and has an id. Order is the server's order.
    """
    usable = [d for d in devices if d.is_usable]
    for device in usable:
        if device.is_active:
            return device
    return usable[0] if usable else None


class DeviceResolver:
    """Fetches the device list fresh on every call.

    Listings and play lookups are counted separately: only the newest call of
    the same kind counts, so refreshing the device list never cancels a play.
    """

    def __init__(self, api) -> None:
        self._api = api
        self._generations = {LISTING: 0, PLAYBACK: 0}

    async def _fetch(self, kind: str) -> Tuple[List[Device], Optional[Device]]:
        self._generations[kind] += 1
        generation = self._generations[kind]
        try:
            devices = await self._api.available_devices()
        except SpotwrapError as e:
            if generation != self._generations[kind]:
                raise SupersededRequest(f"{kind} device lookup superseded") from e
            raise
        if generation != self._generations[kind]:
            raise SupersededRequest(f"{kind} device lookup superseded")
        return devices, select_device(devices)

    async def devices(self) -> Tuple[List[Device], Optional[Device]]:
        """Return all devices and the one select_device() picks.

        Raises SupersededRequest if another listing started while this one was
        waiting for the server.
        """
        return await self._fetch(LISTING)

    async def resolve(self) -> Optional[Device]:
        """Device for a play command. Only a newer resolve() supersedes this one."""
        devices, device = await self._fetch(PLAYBACK)
        if device is None:
            logger.info("No usable device among %d reported", len(devices))
        else:
            logger.debug("Selected device %s (%s)", device.id, device.name)
        return device
