"""
Interactive console with tree/indexes aliases and clean_cache().

Evaluating ``tree`` or ``indexes`` at the prompt walks the server and
prints the report, the same way a bare name is echoed by the REPL.
"""
import code
from typing import Optional

import inventory
import pruner

BANNER = "\n".join([
    "Aliases - Helpers:",
    " * tree: prints all databases and collections",
    " * indexes: prints all databases, collections and indexes",
    " * cleanCache(): drops cache collections",
])


class ReportAlias:
    """Renders a fresh report each time the REPL echoes it."""

    def __init__(self, client, with_indexes: bool):
        self._client = client
        self._with_indexes = with_indexes

    def __repr__(self):
        return inventory.build_tree(self._client, with_indexes=self._with_indexes)


def shell_namespace(client, matcher: Optional[pruner.Matcher] = None) -> dict:
    def clean_cache():
        return pruner.clean_cache(client, matcher=matcher)

    return {
        "client": client,
        "tree": ReportAlias(client, with_indexes=False),
        "indexes": ReportAlias(client, with_indexes=True),
        "clean_cache": clean_cache,
        "cleanCache": clean_cache,
    }


def start_shell(client, matcher: Optional[pruner.Matcher] = None) -> None:
    code.interact(banner=BANNER, local=shell_namespace(client, matcher), exitmsg="")
