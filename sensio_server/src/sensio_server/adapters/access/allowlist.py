from typing import Iterable, List, Sequence

from sensio_core.domain.models import DeviceInfo
from sensio_core.domain.ports import DeviceDirectory


class AllowlistDirectory(DeviceDirectory):
    """Static device list shared by every caller; an empty list means unrestricted."""

    def __init__(self, serials: Iterable[str]):
        self.serials = list(serials)

    def list_devices(self, caller_id: str) -> List[DeviceInfo]:
        return [DeviceInfo(device_serial=s, name=s) for s in self.serials]

    def denied_serials(self, caller_id: str, device_serials: Sequence[str]) -> List[str]:
        if self.is_unrestricted():
            return []
        allowed = set(self.serials)
        return [s for s in device_serials if s not in allowed]

    def is_unrestricted(self) -> bool:
        return not self.serials
