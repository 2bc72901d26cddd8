from contextlib import AbstractContextManager

from sqlalchemy.orm import Session


class SqlAlchemyUoW(AbstractContextManager):
    def __init__(self, session: Session):
        self.session = session

    def __enter__(self):
        return self

    def __exit__(self, exc_type, *_):
        if exc_type:
            self.session.rollback()
        else:
            self.session.commit()
        self.session.close()

    def device_repo(self):
        from sensio_server.adapters.db.repository import UserDeviceRepository

        return UserDeviceRepository(self.session)
