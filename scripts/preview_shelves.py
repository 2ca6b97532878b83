import asyncio, sys, os

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(ROOT)

from storefront.catalog.client import CatalogClient
from storefront.catalog.grouping import FlatResults
from storefront.services.shelf_service import ShelfService


async def main(visitor_key: str, query: str = ""):
    service = ShelfService(CatalogClient())
    view = await service.shelves(visitor_key, query=query)

    if isinstance(view, FlatResults):
        print(f"=== {view.tier.upper()} MATCHES for {query!r} ===")
        for p in view.products:
            print(f"  {p.name} ({p.brand}) - {p.category}")
        return

    for category, products in view.shelves.items():
        print(f"=== {category} ({len(products)}) ===")
        for p in products:
            print(f"  {p.name} ({p.brand}) {p.price}")
        print()

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: preview_shelves.py VISITOR_KEY [QUERY]")
        sys.exit(1)
    asyncio.run(main(sys.argv[1], " ".join(sys.argv[2:])))
