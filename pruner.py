import os
import re
from typing import Callable, List, Optional, Tuple

from tqdm import tqdm

from inventory import SYSTEM_INDEXES
from mongo_utils import drop_collection, get_database, iter_collection_names, list_databases

CACHE_MARKER = os.getenv("CACHE_MARKER", "_cache")

Matcher = Callable[[str], bool]


def substring_matcher(marker: str) -> Matcher:
    """Case-sensitive: matches names containing marker anywhere."""
    return lambda name: marker in name


def prefix_matcher(prefix: str) -> Matcher:
    return lambda name: name.startswith(prefix)


def pattern_matcher(pattern: str) -> Matcher:
    """Matches names where the regular expression is found (re.search)."""
    regex = re.compile(pattern)
    return lambda name: regex.search(name) is not None


def _databases(client, progress: bool):
    databases = list_databases(client)
    if not progress:
        return databases
    return tqdm(databases, desc="Databases", unit="db")


def find_cache_collections(client, matcher: Optional[Matcher] = None,
                           progress: bool = False) -> List[Tuple[str, str]]:
    """List (database, collection) pairs the matcher accepts, without dropping."""
    matcher = matcher or substring_matcher(CACHE_MARKER)
    found = []
    for info in _databases(client, progress):
        db = get_database(client, info["name"])
        for name in iter_collection_names(db):
            if name != SYSTEM_INDEXES and matcher(name):
                found.append((info["name"], name))
    return found


def clean_cache(client, matcher: Optional[Matcher] = None,
                progress: bool = False) -> List[Tuple[str, str]]:
    """
    Drop every collection, in every database, whose name the matcher accepts.

    Default matcher: names containing CACHE_MARKER. Each dropped name is
    printed as it goes. Not transactional: a failing drop raises and
    leaves earlier drops in place.

    Returns the (database, collection) pairs that were dropped.
    """
    matcher = matcher or substring_matcher(CACHE_MARKER)
    dropped = []
    for info in _databases(client, progress):
        db = get_database(client, info["name"])
        # Materialize names first so drops don't disturb the open cursor
        names = [name for name in iter_collection_names(db)
                 if name != SYSTEM_INDEXES and matcher(name)]
        for name in names:
            tqdm.write(name)
            drop_collection(db, name)
            dropped.append((info["name"], name))
    return dropped
