from sqlalchemy import Boolean, Column, Float, Integer, Text

from fleetscore.data.base import Base


class SignalDefinitionORM(Base):
    __tablename__ = "signal_definitions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    position = Column(Integer, nullable=False)

    name = Column(Text, nullable=False)
    display_name = Column(Text, nullable=True)
    include_in_report = Column(Boolean, nullable=False, default=True)

    signal_type = Column(Text, nullable=False, default="Number")
    direction = Column(Text, nullable=False, default="None")
    display_format = Column(Text, nullable=True)

    weight = Column(Float, nullable=False, default=0.0)
    min_value = Column(Float, nullable=True)
    max_value = Column(Float, nullable=True)
