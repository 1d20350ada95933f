#!/usr/bin/env python
"""Command line access to the ospry api: upload, inspect and sign images."""
from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

from ospry import FORMATS, Metadata, OspryClient, OspryConfig, OspryError, RenderOpts, expires_in
from ospry.config import DEFAULT_RENDER_HOST, DEFAULT_SERVER_URL


def _print_metadata(metadata: Metadata) -> None:
    print(json.dumps(metadata.model_dump(mode="json", by_alias=True), indent=2))


async def run(args: argparse.Namespace) -> None:
    config = OspryConfig(key=args.key, server_url=args.server_url, render_host=args.render_host)
    async with OspryClient(config) as client:
        if args.command == "upload":
            path = Path(args.path)
            _print_metadata(await client.upload(path.name, path.read_bytes(), is_private=args.private))
        elif args.command == "metadata":
            _print_metadata(await client.get_metadata(args.id))
        elif args.command == "claim":
            _print_metadata(await client.claim(args.id))
        elif args.command == "make-private":
            _print_metadata(await client.make_private(args.id))
        elif args.command == "make-public":
            _print_metadata(await client.make_public(args.id))
        elif args.command == "delete":
            await client.delete(args.id)
            print(f"Deleted {args.id}")
        elif args.command == "format-url":
            opts = RenderOpts(
                format=args.format,
                max_width=args.max_width,
                max_height=args.max_height,
                time_expired=expires_in(args.ttl) if args.ttl else None,
            )
            print(client.format_url(args.url, opts))


def main() -> None:
    parser = argparse.ArgumentParser(description="ospry image hosting client")
    parser.add_argument("--key", default=os.getenv("OSPRY_SECRET_KEY"), help="api key (default: $OSPRY_SECRET_KEY)")
    parser.add_argument("--server_url", default=os.getenv("OSPRY_SERVER_URL", DEFAULT_SERVER_URL))
    parser.add_argument("--render_host", default=os.getenv("OSPRY_RENDER_HOST", DEFAULT_RENDER_HOST))
    sub = parser.add_subparsers(dest="command", required=True)

    upload = sub.add_parser("upload", help="upload an image file")
    upload.add_argument("path")
    upload.add_argument("--private", action="store_true")

    for name in ("metadata", "claim", "make-private", "make-public", "delete"):
        sub.add_parser(name).add_argument("id")

    fmt = sub.add_parser("format-url", help="render and optionally sign an image url")
    fmt.add_argument("url")
    fmt.add_argument("--format", choices=FORMATS)
    fmt.add_argument("--max_width", type=int)
    fmt.add_argument("--max_height", type=int)
    fmt.add_argument("--ttl", type=int, help="sign the url, valid for this many seconds")

    args = parser.parse_args()
    if not args.key:
        parser.error("an api key is required (--key or OSPRY_SECRET_KEY)")
    try:
        asyncio.run(run(args))
    except OspryError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
