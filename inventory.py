from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from mongo_utils import (
    GB,
    MB,
    count_documents,
    database_stats,
    get_database,
    index_sizes,
    iter_collection_names,
    list_databases,
)

SYSTEM_INDEXES = "system.indexes"
DEFAULT_INDEX = "_id_"
LINE_SEPARATOR = "\r\n"


@dataclass
class CollectionSummary:
    name: str
    count: int
    index_sizes: Optional[Dict[str, float]] = None  # MB, None when not requested

    def secondary_indexes(self) -> List[str]:
        if not self.index_sizes:
            return []
        return [name for name in self.index_sizes if name != DEFAULT_INDEX]


@dataclass
class DatabaseSummary:
    name: str
    size_on_disk: float   # bytes
    data_size: float      # GB, scaled by the server
    index_size: float     # GB, scaled by the server
    objects: int
    collections: List[CollectionSummary] = field(default_factory=list)


def summarize_collection(db, name: str, with_indexes: bool) -> CollectionSummary:
    summary = CollectionSummary(name=name, count=count_documents(db, name))
    if with_indexes:
        summary.index_sizes = index_sizes(db, name, scale=MB)
    return summary


def collect_inventory(client, with_indexes: bool = False) -> Iterator[DatabaseSummary]:
    """
    Walk every database then every collection, in server order.

    Each database is addressed through its own handle; nothing on the
    client is switched. Driver errors propagate and stop the walk.
    """
    for info in list_databases(client):
        db = get_database(client, info["name"])
        stats = database_stats(db, scale=GB)
        summary = DatabaseSummary(
            name=info["name"],
            size_on_disk=info["sizeOnDisk"],
            data_size=stats["dataSize"],
            index_size=stats["indexSize"],
            objects=stats["objects"],
        )
        for name in iter_collection_names(db):
            if name == SYSTEM_INDEXES:
                continue
            summary.collections.append(summarize_collection(db, name, with_indexes))
        yield summary


def format_database_line(summary: DatabaseSummary) -> str:
    disk = summary.size_on_disk / GB
    return (
        f" * {disk:.3f}GB-{summary.data_size:.3f}GB-{summary.index_size:.3f}GB"
        f" ({summary.objects})              {summary.name}"
    )


def format_lines(summaries, with_indexes: bool = False) -> List[str]:
    lines = []
    for db_summary in summaries:
        lines.append(format_database_line(db_summary))
        for coll in db_summary.collections:
            lines.append(f"\t* {coll.name} ({coll.count})")
            if with_indexes:
                indexes = coll.secondary_indexes()
                if indexes:
                    lines.append("\t\t* " + " - ".join(indexes))
    return lines


def build_tree(client, with_indexes: bool = False) -> str:
    """Return the database/collection (and optionally index) tree as text."""
    summaries = collect_inventory(client, with_indexes=with_indexes)
    return LINE_SEPARATOR.join(format_lines(summaries, with_indexes=with_indexes))


def tree(client) -> str:
    return build_tree(client, with_indexes=False)


def indexes(client) -> str:
    return build_tree(client, with_indexes=True)
