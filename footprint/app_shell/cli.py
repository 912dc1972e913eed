import argparse
import json
import logging
import os
import sys
from pathlib import Path

from footprint.adapters.sqlite.migrator import SQLiteMigrator
from footprint.app_shell.context import ServiceContext, build_payments
from footprint.components.publish import PublishInput
from footprint.components.tiles import GetFootprintInput, ParseInput, run_get_footprint, run_parse
from footprint.core.services.classifier import partition_for
from footprint.rules.loader import default_rules_path, load_rules

logger = logging.getLogger("cli")


def db_path() -> str:
    return str(Path(os.environ.get("FOOTPRINT_DATA_DIR", "./data")) / "footprint.db")


def get_context() -> ServiceContext:
    rules_path = default_rules_path()
    if not rules_path.exists():
        logger.error("Rules file %s not found.", rules_path)
        sys.exit(1)

    rules = load_rules(rules_path)
    return ServiceContext.create(db_path(), rules, payments=build_payments(rules))


def handle_migrate(args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(db_path()).run_migrations()
    if applied:
        for name in applied:
            print(f"Applied {name}")
    else:
        print("Database is up to date.")


def handle_next_serial(ctx: ServiceContext, args: argparse.Namespace) -> None:
    print(ctx.counter.peek_next_serial())


def handle_classify(ctx: ServiceContext, args: argparse.Namespace) -> None:
    tile = run_parse(ParseInput(text=" ".join(args.text)), ctx.tiles).tile
    media_types = tuple(ctx.rules.content.media_types)
    data = tile.model_dump(mode="json", exclude={"id", "position"}, exclude_none=True)
    data["partition"] = partition_for(tile.type, media_types)
    print(json.dumps(data, indent=2))


def handle_show(ctx: ServiceContext, args: argparse.Namespace) -> None:
    result = run_get_footprint(GetFootprintInput(slug=args.slug), ctx.tiles)
    if not result.success or result.page is None:
        logger.error("No footprint at '%s'.", args.slug)
        sys.exit(1)

    page = result.page
    print(f"#{page.serial_number} /{page.slug} ({page.theme})")
    if page.display_name:
        print(f"  {page.display_name}")
    for tile in result.tiles:
        print(f"  [{tile.position}] {tile.type:<10} {tile.title or tile.url or ''}")


def handle_publish(ctx: ServiceContext, args: argparse.Namespace) -> None:
    """Re-run the publish pipeline for a paid transaction without a draft."""
    result = ctx.publish.run_publish(
        PublishInput(transaction_id=args.transaction_id, slug=args.slug, source="cli")
    )
    if not result.success:
        for err in result.errors:
            logger.error("%s: %s", err.code, err.message)
        sys.exit(2 if any(err.retryable for err in result.errors) else 1)

    print(f"#{result.serial_number} /{result.slug} (created={result.created})")


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Footprint CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # next-serial
    subparsers.add_parser("next-serial", help="Show the serial the next purchase would get")

    # classify
    classify_parser = subparsers.add_parser("classify", help="Classify pasted text")
    classify_parser.add_argument("text", nargs="+", help="URL or free text")

    # show
    show_parser = subparsers.add_parser("show", help="Show a footprint and its tiles")
    show_parser.add_argument("slug")

    # publish
    publish_parser = subparsers.add_parser(
        "publish", help="Publish (or re-publish) a paid transaction"
    )
    publish_parser.add_argument("transaction_id")
    publish_parser.add_argument("slug")

    args = parser.parse_args()

    if args.command == "migrate":
        handle_migrate(args)
        return

    ctx = get_context()

    if args.command == "next-serial":
        handle_next_serial(ctx, args)
    elif args.command == "classify":
        handle_classify(ctx, args)
    elif args.command == "show":
        handle_show(ctx, args)
    elif args.command == "publish":
        handle_publish(ctx, args)


if __name__ == "__main__":
    main()
