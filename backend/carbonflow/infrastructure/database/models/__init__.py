from .item import ItemModel

__all__ = [
    "ItemModel",
]
