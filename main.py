import argparse
import sys

from pymongo.errors import PyMongoError

from inventory import build_tree
from mongo_utils import MONGO_URI, InvalidStatsError, get_client
from pruner import (
    CACHE_MARKER,
    clean_cache,
    find_cache_collections,
    pattern_matcher,
    prefix_matcher,
    substring_matcher,
)
from shell import BANNER, start_shell


def build_matcher(args):
    if args.pattern:
        return pattern_matcher(args.pattern)
    if args.prefix:
        return prefix_matcher(args.prefix)
    return substring_matcher(args.marker)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MongoDB tree and cache helpers")
    parser.add_argument("--uri", default=MONGO_URI, help="MongoDB connection string (env MONGO_URI)")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("tree", help="Print all databases and collections")
    sub.add_parser("indexes", help="Print all databases, collections and indexes")

    clean = sub.add_parser("clean-cache", help="Drop cache collections from all databases")
    match = clean.add_mutually_exclusive_group()
    match.add_argument("--marker", default=CACHE_MARKER, help="Substring marking a cache collection (env CACHE_MARKER)")
    match.add_argument("--prefix", help="Match collections starting with this prefix instead")
    match.add_argument("--pattern", help="Match collections with this regular expression instead")
    clean.add_argument("--dry-run", action="store_true", help="List matching collections without dropping them")
    clean.add_argument("--no-progress", action="store_true", help="Hide the progress bar")

    shell = sub.add_parser("shell", help="Open an interactive console with the helpers loaded")
    shell.add_argument("--marker", default=CACHE_MARKER, help="Substring used by clean_cache()")
    shell.set_defaults(prefix=None, pattern=None)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        print(BANNER)
        return 0

    client = get_client(args.uri)
    try:
        if args.command == "tree":
            print(build_tree(client, with_indexes=False))
        elif args.command == "indexes":
            print(build_tree(client, with_indexes=True))
        elif args.command == "clean-cache":
            matcher = build_matcher(args)
            if args.dry_run:
                for db_name, name in find_cache_collections(client, matcher, progress=not args.no_progress):
                    print(f"{db_name}.{name}")
            else:
                dropped = clean_cache(client, matcher, progress=not args.no_progress)
                print(f"Dropped {len(dropped)} collection(s)", file=sys.stderr)
        elif args.command == "shell":
            start_shell(client, build_matcher(args))
    except (PyMongoError, InvalidStatsError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
