from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import Base


class ItemStock(Base):
    __tablename__ = "item_stock"
    __table_args__ = (
        UniqueConstraint("item_id", "location_id", name="ux_item_stock_item_location"),
        CheckConstraint("amount >= 0", name="ck_item_stock_amount_non_negative"),
    )

    id = Column(Integer, primary_key=True)

    item_id = Column(
        Integer,
        ForeignKey("item.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    location_id = Column(
        Integer,
        ForeignKey("location.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount = Column(Integer, nullable=False, default=0)

    item = relationship("Item", back_populates="stocks")
    location = relationship("Location")
