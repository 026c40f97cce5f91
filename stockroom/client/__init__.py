from stockroom.client.api import ApiError, StockroomClient, VersionConflict
from stockroom.client.autosave import EditBuffer, InventoryAutosaver, SaveState
from stockroom.client.item_editor import ItemEditor

__all__ = [
    "ApiError",
    "EditBuffer",
    "InventoryAutosaver",
    "ItemEditor",
    "SaveState",
    "StockroomClient",
    "VersionConflict",
]
