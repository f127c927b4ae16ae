from sqlalchemy import Column, Float, Integer, Text

from fleetscore.data.base import Base


class RunORM(Base):
    __tablename__ = "runs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    start_time = Column(Float, nullable=False)
    end_time = Column(Float, nullable=True)

    report_location = Column(Text, nullable=True)
