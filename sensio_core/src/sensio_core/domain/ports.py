from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from sensio_core.domain.models import DeviceInfo
from sensio_core.domain.raw_records import RawRecord


class IndoorDataSource(Protocol):
    def fetch(
        self,
        device_serials: Sequence[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[RawRecord]: ...


class DeviceDirectory(Protocol):
    def list_devices(self, caller_id: str) -> List[DeviceInfo]: ...

    def denied_serials(self, caller_id: str, device_serials: Sequence[str]) -> List[str]: ...

    def is_unrestricted(self) -> bool: ...
