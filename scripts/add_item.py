"""
Homestock — Admin Item Registration Script

Creates an items row with optional platform SKU bindings, e.g. to seed a
deployment or bind SKUs the web client cannot yet search for. Items with at
least one SKU are picked up by the next daily price fetch.

Usage:
    python scripts/add_item.py --owner-id 7f3c... --name "Olive oil" --jd-sku 100012043978
    python scripts/add_item.py --owner-id 7f3c... --name "Tissues" --spec "3-ply x 24" --quantity 2 --pdd-sku 6012
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Resolve project root so this script can be run from any working directory
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from homestock.config import settings
from homestock.models.item import Item


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Register a Homestock item (items row) with optional platform SKUs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/add_item.py --owner-id 7f3c --name "Olive oil" --jd-sku 100012043978
  python scripts/add_item.py --owner-id 7f3c --name "Tissues" --quantity 2 --tmall-sku 5561
""",
    )
    parser.add_argument("--owner-id", type=str, required=True, help="Auth user id of the owner.")
    parser.add_argument("--name", type=str, required=True, help="Item name.")
    parser.add_argument("--spec", type=str, default=None, help="Size/variant description.")
    parser.add_argument("--quantity", type=int, default=1, help="Units on hand (default: 1).")
    parser.add_argument("--barcode", type=str, default=None, help="EAN/UPC barcode.")
    parser.add_argument("--jd-sku", type=str, default=None, help="JD SKU (with or without J_).")
    parser.add_argument("--tmall-sku", type=str, default=None, help="Tmall item id.")
    parser.add_argument("--pdd-sku", type=str, default=None, help="PDD goods id.")
    args = parser.parse_args(argv)

    if args.quantity < 0:
        parser.error("--quantity must be non-negative")
    return args


async def create_item(args: argparse.Namespace) -> str:
    """Insert the items row and return its id."""
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with session_factory() as session:
        item = Item(
            owner_id=args.owner_id,
            name=args.name,
            spec=args.spec,
            quantity=args.quantity,
            barcode=args.barcode,
            jd_sku=args.jd_sku,
            tmall_sku=args.tmall_sku,
            pdd_sku=args.pdd_sku,
        )
        session.add(item)
        await session.commit()
        item_id = item.id

    await engine.dispose()
    return item_id


async def main() -> None:
    args = parse_args()

    print(f"Creating item: name={args.name!r}, owner_id={args.owner_id}")

    try:
        item_id = await create_item(args)
        print("Item created successfully.")
        print(f"  items.id  = {item_id}")
        print(f"  jd_sku    = {args.jd_sku}")
        print(f"  tmall_sku = {args.tmall_sku}")
        print(f"  pdd_sku   = {args.pdd_sku}")
        print()
        if args.jd_sku or args.tmall_sku or args.pdd_sku:
            print("Prices will be recorded on the next scheduled price fetch.")
        else:
            print("No SKU bound: this item will not be priced.")
    except Exception as e:
        print(f"Failed to create item: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
