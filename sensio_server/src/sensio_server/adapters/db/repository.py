from typing import Callable, List, Optional, Sequence

from sensio_core.domain.models import DeviceInfo
from sensio_core.domain.ports import DeviceDirectory
from sqlalchemy import select
from sqlalchemy.orm import Session

from sensio_server.adapters.db.sqlalchemy_models import UserDeviceORM
from sensio_server.adapters.db.uow import SqlAlchemyUoW


class UserDeviceRepository:
    def __init__(self, session: Session):
        self.session = session

    # READ
    def get_devices_for_user(self, user_id: str) -> List[DeviceInfo]:
        stmt = (
            select(UserDeviceORM)
            .where(UserDeviceORM.user_id == user_id)
            .order_by(UserDeviceORM.device_serial.asc())
        )
        return [self._to_domain(r) for r in self.session.scalars(stmt).all()]

    # WRITE
    def add_device(self, user_id: str, device_serial: str, device_name: Optional[str] = None) -> None:
        row = UserDeviceORM()
        row.user_id = user_id
        row.device_serial = device_serial
        row.device_name = device_name
        self.session.add(row)

    # helper
    @staticmethod
    def _to_domain(row: UserDeviceORM) -> DeviceInfo:
        return DeviceInfo(
            device_serial=row.device_serial,
            name=row.device_name or row.device_serial,
            user_id=row.user_id,
        )


class SqlDeviceDirectory(DeviceDirectory):
    """Device ownership kept in the local ``user_devices`` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def list_devices(self, caller_id: str) -> List[DeviceInfo]:
        with SqlAlchemyUoW(self.session_factory()) as uow:
            return uow.device_repo().get_devices_for_user(caller_id)

    def denied_serials(self, caller_id: str, device_serials: Sequence[str]) -> List[str]:
        owned = {d.device_serial for d in self.list_devices(caller_id)}
        return [s for s in device_serials if s not in owned]

    def is_unrestricted(self) -> bool:
        return False

    def grant(self, caller_id: str, device_serial: str, device_name: Optional[str] = None) -> None:
        with SqlAlchemyUoW(self.session_factory()) as uow:
            uow.device_repo().add_device(caller_id, device_serial, device_name)
