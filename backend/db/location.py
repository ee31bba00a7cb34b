from sqlalchemy import Column, Integer, Text
from .database import Base


class Location(Base):
    __tablename__ = "location"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
