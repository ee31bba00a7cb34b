from .item import Item, ItemIdentifier, ItemIdentifierType
from .location import Location
from .inventory.stock import ItemStock

__all__ = ["Item", "ItemIdentifier", "ItemIdentifierType", "Location", "ItemStock"]
