__all__ = ["UserDeviceORM"]

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from sensio_server.adapters.db.session import Base


class UserDeviceORM(Base):
    __tablename__ = "user_devices"
    __table_args__ = (UniqueConstraint("user_id", "device_serial"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    device_serial: Mapped[str] = mapped_column(String, index=True, nullable=False)
    device_name: Mapped[str | None] = mapped_column(String, nullable=True)
