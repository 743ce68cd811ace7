"""Product ORM model – one catalog entry."""

from sqlalchemy import Column, Integer, String, Float

from database import Base, SQLITE_TABLE_ARGS


class Product(Base):
    __tablename__ = "products"
    __table_args__ = SQLITE_TABLE_ARGS

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    image_url = Column(String(2048), nullable=False, default="", server_default="")
