from sqlalchemy import Column, Float, Integer, Text

from fleetscore.data.base import Base


class AccountORM(Base):
    __tablename__ = "accounts"

    # insertion order is the snapshot order
    id = Column(Integer, primary_key=True, autoincrement=True)

    customer_id = Column(Text, nullable=False, unique=True)
    processed_at = Column(Float, nullable=True, index=True)
