from .catalog import BUNDLED_CATALOG_PATH, DestinationCatalog
from .json_store import JSONStore

__all__ = ["BUNDLED_CATALOG_PATH", "DestinationCatalog", "JSONStore"]
