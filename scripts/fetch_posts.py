#!/usr/bin/env python3
"""
Fetch a TikTok user's posts and print them as JSON.

TikTok's API has strong anti-bot protection. For best results pass a
cookie string copied from a logged-in browser session (DevTools > Network)
and a signer for the X-Bogus parameter.

Examples:
    python scripts/fetch_posts.py @someone --limit 20 --signer my_helpers.xbogus:sign
    python scripts/fetch_posts.py someone --cookie-file cookies.txt --proxy socks5://127.0.0.1:9050
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import aiofiles

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tiksnap.core.exceptions import SignerLoadError
from tiksnap.core.posts_service import PostsService
from tiksnap.core.signing import load_signer
from tiksnap.storage.database import close_db, init_db
from tiksnap.utils.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch a TikTok user's posts")
    parser.add_argument("username", help="TikTok username, with or without @")
    parser.add_argument(
        "--cookie",
        action="append",
        default=[],
        help="Cookie string from a browser session (repeatable)",
    )
    parser.add_argument("--cookie-file", type=Path, help="File holding a cookie string")
    parser.add_argument("--proxy", help="Proxy URL (http://, https:// or socks5://)")
    parser.add_argument("--limit", type=int, default=0, help="Maximum number of posts (0 = all)")
    parser.add_argument("--signer", help="X-Bogus signer as 'module:function'")
    parser.add_argument("--output", type=Path, help="Write the JSON result to this file")
    parser.add_argument(
        "--record-history",
        action="store_true",
        help="Save this fetch to the history database",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    return parser


def collect_cookies(args: argparse.Namespace) -> Optional[List[str]]:
    cookies = list(args.cookie)
    if args.cookie_file:
        text = args.cookie_file.read_text(encoding="utf-8").strip()
        if text:
            cookies.append(text)
    return cookies or None


async def write_output(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(json.dumps(payload, ensure_ascii=False, indent=2))


async def run(args: argparse.Namespace) -> int:
    signer = load_signer(args.signer) if args.signer else None

    if args.record_history:
        init_db()

    service = PostsService(signer=signer, record_history=args.record_history)
    try:
        outcome = await service.get_user_posts(
            args.username,
            cookie=collect_cookies(args),
            proxy=args.proxy,
            post_limit=args.limit,
        )
    finally:
        if args.record_history:
            await close_db()

    payload = outcome.to_dict()
    if args.output:
        await write_output(args.output, payload)
        print(f"Saved {payload.get('totalPosts', 0)} post(s) to {args.output}", file=sys.stderr)
    else:
        print(json.dumps(payload, ensure_ascii=False, indent=2))

    return 0 if payload["status"] == "success" else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.limit < 0:
        print("❌ --limit must be 0 or a positive number", file=sys.stderr)
        return 2

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        return asyncio.run(run(args))
    except SignerLoadError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\n⚠️  Interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
