from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from .database import Base


def whole_number(value):
    """2.0 -> 2 so integral thresholds serialize as JSON integers"""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class Item(Base):
    """Something kept in stock; `threshold` is an advisory reorder point"""
    __tablename__ = "item"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False, index=True)
    threshold = Column(Numeric(asdecimal=False), nullable=True)

    identifiers = relationship("ItemIdentifier", back_populates="item", cascade="all, delete-orphan")
    stocks = relationship("ItemStock", back_populates="item", cascade="all, delete-orphan")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "threshold": whole_number(self.threshold),
        }


class ItemIdentifierType(Base):
    __tablename__ = "item_identifier_type"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)  # 'EAN13'


class ItemIdentifier(Base):
    """A scannable code bound to exactly one item"""
    __tablename__ = "item_identifier"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("item.id", ondelete="CASCADE"), nullable=False, index=True)
    identifier = Column(Text, nullable=False, unique=True)
    item_identifier_type = Column(Integer, ForeignKey("item_identifier_type.id"), nullable=False)

    item = relationship("Item", back_populates="identifiers")
