from sqlalchemy import Column, Float, Text

from fleetscore.data.base import Base


class ConfigLockORM(Base):
    __tablename__ = "config_locks"

    resource = Column(Text, primary_key=True)
    locked_at = Column(Float, nullable=False)
    note = Column(Text, nullable=True)
