from pymongo import MongoClient
import os
from typing import Optional, Dict, Any, Iterator, List

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")

GB = 1024 * 1024 * 1024
MB = 1024 * 1024

_client = None


class InvalidStatsError(ValueError):
    """A stats command returned a field that is not a number."""

    def __init__(self, source: str, field: str, value: Any):
        super().__init__(f"{source}: field {field!r} is not numeric ({value!r})")
        self.source = source
        self.field = field
        self.value = value


def get_client(uri: Optional[str] = None) -> MongoClient:
    """Return the shared client, creating it on first use."""
    global _client
    if _client is None:
        _client = MongoClient(uri or MONGO_URI)
    return _client


def numeric_field(doc: Dict[str, Any], field: str, source: str):
    """Read a numeric stats field; missing means zero."""
    value = doc.get(field)
    if value is None:
        return 0
    # bool is an int subclass but never a size
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        # Int64 / Decimal128 from bson
        to_decimal = getattr(value, "to_decimal", None)
        if to_decimal is not None:
            return float(to_decimal())
        raise InvalidStatsError(source, field, value)
    return value


def list_databases(client) -> List[Dict[str, Any]]:
    """Return [{name, sizeOnDisk}, ...] in server order."""
    return [
        {"name": info["name"], "sizeOnDisk": numeric_field(info, "sizeOnDisk", info["name"])}
        for info in client.list_databases()
    ]


def get_database(client, name: str):
    """Per-database handle. The client itself is never re-pointed."""
    return client[name]


def database_stats(db, scale: int = GB) -> Dict[str, Any]:
    stats = db.command("dbStats", scale=scale)
    return {
        "dataSize": numeric_field(stats, "dataSize", db.name),
        "indexSize": numeric_field(stats, "indexSize", db.name),
        "objects": int(numeric_field(stats, "objects", db.name)),
    }


def iter_collection_names(db) -> Iterator[str]:
    """Yield every collection name of db.

    The command cursor issues getMore for each further batch, so the
    listing is never cut at the first batch.
    """
    for info in db.list_collections():
        yield info["name"]


def count_documents(db, name: str) -> int:
    result = db.command("count", name)
    return int(numeric_field(result, "n", f"{db.name}.{name}"))


def index_sizes(db, name: str, scale: int = MB) -> Dict[str, Any]:
    """Ordered mapping index name -> size, as returned by collStats."""
    stats = db.command("collStats", name, scale=scale)
    sizes = stats.get("indexSizes") or {}
    source = f"{db.name}.{name}"
    return {index: numeric_field(sizes, index, source) for index in sizes}


def drop_collection(db, name: str) -> None:
    db.drop_collection(name)
