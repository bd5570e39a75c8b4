"""CLI entry point for campus wrapped."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import httpx

from campus_wrapped.config import Config, load_config
from campus_wrapped.documents import DocumentCache, file_fetcher
from campus_wrapped.errors import StatsStoreUnavailable
from campus_wrapped.models import StatRecord
from campus_wrapped.resolver import PoiResolver, parse_store
from campus_wrapped.urls import poi_id_from_url


def _raw_id(target: str | None, config: Config) -> str | None:
    """Accept either a bare id/short code or a full visitor URL."""
    if target and "/" in target:
        return poi_id_from_url(target, config.data.base_path)
    return target


def _local_resolver(config: Config) -> PoiResolver:
    fetch = file_fetcher(config.resolved_public_dir)
    return PoiResolver(
        stats=DocumentCache(config.data.stats_path, fetch, error_cls=StatsStoreUnavailable),
        reverse_map=DocumentCache(config.data.reverse_map_path, fetch),
    )


async def _resolve(target: str | None, config: Config, local: bool) -> StatRecord:
    raw_id = _raw_id(target, config)
    if local:
        return await _local_resolver(config).resolve_or_default(raw_id)
    async with httpx.AsyncClient(timeout=None, follow_redirects=True) as client:
        return await PoiResolver.from_config(config, client).resolve_or_default(raw_id)


async def _share_url(target: str | None, config: Config) -> str:
    """Resolve the campus and look up its share link over one client."""
    from campus_wrapped.share import ShareLinks

    current_url = target if target and "/" in target else config.data.url_for(target or "")
    async with httpx.AsyncClient(timeout=None, follow_redirects=True) as client:
        record = await PoiResolver.from_config(config, client).resolve_or_default(_raw_id(target, config))
        return await ShareLinks.from_config(config, client).share_url(record.poi_id, current_url)


def _print_record(record: StatRecord) -> None:
    print(f"{record.college_name} ({record.poi_id})")
    for name, value in record.stats.model_dump().items():
        print(f"  {name}: {value}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Campus Wrapped")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command")

    # resolve command
    resolve_parser = sub.add_parser("resolve", help="Resolve a POI id, short code or URL to its record")
    resolve_parser.add_argument("target", nargs="?", help="POI id, short code or visitor URL")
    resolve_parser.add_argument("--local", action="store_true", help="Read documents from the public dir")

    # story command
    story_parser = sub.add_parser("story", help="Print the screen sequence for a campus")
    story_parser.add_argument("target", nargs="?", help="POI id, short code or visitor URL")
    story_parser.add_argument("--local", action="store_true", help="Read documents from the public dir")

    # card command
    card_parser = sub.add_parser("card", help="Render the share card PNG for a campus")
    card_parser.add_argument("target", nargs="?", help="POI id, short code or visitor URL")
    card_parser.add_argument("-o", "--output", type=Path, default=Path("wrapped.png"))
    card_parser.add_argument("--local", action="store_true", help="Read documents from the public dir")

    # share command
    share_parser = sub.add_parser("share", help="Print the share link for a campus")
    share_parser.add_argument("target", nargs="?", help="POI id, short code or visitor URL")

    # convert command
    convert_parser = sub.add_parser("convert", help="Convert the campus spreadsheet CSV to pois.json")
    convert_parser.add_argument("csv_path", type=Path)
    convert_parser.add_argument("-o", "--output", type=Path, default=None)

    # shorten command
    shorten_parser = sub.add_parser("shorten", help="Create is.gd short links for every POI")
    shorten_parser.add_argument("--pois", type=Path, default=None, help="pois.json (default: public dir)")

    # mask command
    mask_parser = sub.add_parser("mask", help="Mask the Weblink column of a campus sheet")
    mask_parser.add_argument("csv_path", type=Path)
    mask_parser.add_argument("--csv-out", type=Path, default=None)

    # export-links command
    sub.add_parser("export-links", help="Write short-links.csv from short-links.json")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    try:
        if args.command == "resolve":
            record = asyncio.run(_resolve(args.target, config, args.local))
            _print_record(record)

        elif args.command == "story":
            from campus_wrapped.story import build_story

            record = asyncio.run(_resolve(args.target, config, args.local))
            for i, screen in enumerate(build_story(record)):
                line = f"{i}. [{screen.type.value}] {screen.title}"
                if screen.display_value:
                    line += f" {screen.display_value} — {screen.subtitle}"
                print(line)

        elif args.command == "card":
            from campus_wrapped.output.card import render_share_card

            record = asyncio.run(_resolve(args.target, config, args.local))
            path = render_share_card(record, args.output)
            print(f"Share card: {path}")

        elif args.command == "share":
            print(asyncio.run(_share_url(args.target, config)))

        elif args.command == "convert":
            from campus_wrapped.datagen.convert import convert_csv, write_store

            output = args.output or config.public_file(config.data.stats_path)
            records = convert_csv(args.csv_path)
            write_store(records, output)
            print(f"Converted {len(records)} POIs to {output}")

        elif args.command == "shorten":
            from campus_wrapped.datagen.shortlinks import GdShortener, generate_short_links

            pois_path = args.pois or config.public_file(config.data.stats_path)
            records = parse_store(json.loads(pois_path.read_text(encoding="utf-8")))
            print(f"Found {len(records)} POIs to process")
            with httpx.Client(timeout=None) as client:
                result = generate_short_links(
                    records,
                    GdShortener(client, config.shortener.isgd_endpoint, name="is.gd"),
                    output_path=config.public_file(config.data.short_links_path),
                    reverse_path=config.public_file(config.data.reverse_map_path),
                    base_url=config.data.base_url,
                    config=config.shortener,
                )
            print(result)

        elif args.command == "mask":
            from campus_wrapped.datagen.shortlinks import (
                GdShortener, TinyUrlShortener, generate_masked_links,
            )

            csv_out = args.csv_out or args.csv_path.with_name(
                f"{args.csv_path.stem} - With Masked Links{args.csv_path.suffix}"
            )
            with httpx.Client(timeout=None) as client:
                masked = generate_masked_links(
                    args.csv_path,
                    [
                        TinyUrlShortener(client, config.shortener.tinyurl_endpoint),
                        GdShortener(client, config.shortener.vgd_endpoint, name="v.gd"),
                    ],
                    csv_out=csv_out,
                    json_out=config.public_file(config.data.masked_links_path),
                    config=config.shortener,
                )
            print(f"Masked {len(masked)} links, sheet: {csv_out}")

        elif args.command == "export-links":
            from campus_wrapped.datagen.shortlinks import export_short_links_csv, load_short_links

            links_path = config.public_file(config.data.short_links_path)
            if not links_path.exists():
                print(f"Short links file not found: {links_path}. Run 'shorten' first.", file=sys.stderr)
                return 1
            out = links_path.with_suffix(".csv")
            rows = export_short_links_csv(load_short_links(links_path), out)
            print(f"Generated CSV with {rows} short links: {out}")

        else:
            parser.print_help()
    except FileNotFoundError as e:
        print(f"File not found: {e.filename}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
