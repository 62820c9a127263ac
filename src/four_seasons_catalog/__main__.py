import argparse
import asyncio
import dataclasses
import json
import sys

from .catalog import Catalog
from .config import get_settings
from .log import configure_logging
from .search.filters import DEFAULT_PAGE_SIZE, SearchFilters


def build_parser():
    parser = argparse.ArgumentParser(
        description="Four Seasons catalog CLI (read-only CMS client)",
    )

    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, etc.)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log records as one JSON object per line",
    )
    parser.add_argument(
        "--api-base",
        default=None,
        help="CMS REST root (overrides FSC_CMS_API_BASE)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("developers", help="List developers")
    developer = sub.add_parser("developer", help="Developer with its compounds")
    developer.add_argument("slug")

    sub.add_parser("locations", help="List locations")

    compounds = sub.add_parser("compounds", help="List compound cards")
    compounds.add_argument("--per-page", type=int, default=12)
    compounds.add_argument("--page", type=int, default=None)

    compound = sub.add_parser("compound", help="Compound detail by slug")
    compound.add_argument("slug")

    search = sub.add_parser("search", help="Search compounds")
    search.add_argument("--q", default=None, help="Free-text query")
    search.add_argument("--location", default=None, help="Location slug or name")
    search.add_argument("--developer", default=None, help="Developer slug or name")
    search.add_argument("--page", type=int, default=1)
    search.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE)

    posts = sub.add_parser("posts", help="List blog posts")
    posts.add_argument("--limit", type=int, default=100)
    post = sub.add_parser("post", help="Blog post by slug")
    post.add_argument("slug")

    return parser


def _payload(value):
    if value is None:
        return None
    if isinstance(value, list):
        return [_payload(v) for v in value]
    if dataclasses.is_dataclass(value):
        return value.to_dict()
    return value


async def run_command(args, catalog):
    command = args.command
    if command == "developers":
        return await catalog.developers()
    if command == "developer":
        return await catalog.developer_page(args.slug)
    if command == "locations":
        return await catalog.locations()
    if command == "compounds":
        return await catalog.compound_cards(per_page=args.per_page, page=args.page)
    if command == "compound":
        return await catalog.compound(args.slug)
    if command == "search":
        filters = SearchFilters(
            query=args.q,
            location=args.location,
            developer=args.developer,
            page=max(1, args.page),
            page_size=args.page_size,
        )
        page, cards = await catalog.search(filters)
        summary = page.to_dict()
        summary["compounds"] = [c.to_dict() for c in cards]
        return summary
    if command == "posts":
        return await catalog.posts(limit=args.limit)
    if command == "post":
        return await catalog.post(args.slug)
    raise ValueError(f"Unknown command: {command}")


async def _run(args):
    settings = get_settings()
    if args.api_base:
        settings = dataclasses.replace(settings, api_base=args.api_base.rstrip("/"))
    async with Catalog(settings) as catalog:
        return await run_command(args, catalog)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, json_lines=args.log_json)

    result = asyncio.run(_run(args))
    if result is None:
        print(json.dumps({"error": "not found"}))
        return 1
    print(json.dumps(_payload(result), ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
