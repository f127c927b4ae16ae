from sqlalchemy import Column, Text

from fleetscore.data.base import Base


class SettingORM(Base):
    __tablename__ = "settings"

    key = Column(Text, primary_key=True)
    setting_type = Column(Text, nullable=False, default="Text")
    value = Column(Text, nullable=True)
