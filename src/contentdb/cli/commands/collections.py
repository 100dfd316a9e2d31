"""Collection inspection commands for contentdb CLI."""

import json

from ...collections.info import collections_index
from ...collections.resolver import resolve_collections
from ...core.config import Config


def add_collections_arguments(parser) -> None:
    """Add arguments for the collections command.

    Args:
        parser: Argument parser for the command.
    """
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the collections index as JSON",
    )


def handle_collections(args, config: Config) -> None:
    """Resolve and list the configured collections.

    Args:
        args: Parsed command arguments.
        config: Application configuration.
    """
    collections = resolve_collections(config.collections, config)

    if args.json:
        print(json.dumps(collections_index(collections), indent=2))
        return

    print(f"Collections ({len(collections)}):")
    for collection in collections:
        source = collection.source
        location = f"{source.cwd} [{source.path}]" if source else "-"
        print(f"  {collection.name} ({collection.type.value})")
        print(f"    Table:   {collection.table_name}")
        print(f"    Source:  {location}")
        print(f"    Columns: {', '.join(collection.columns)}")
        if collection.json_fields:
            print(f"    JSON:    {', '.join(collection.json_fields)}")
