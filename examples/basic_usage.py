"""
Example walking a collection page by page with cursors.

Seeds a small "articles" collection, then pages through it ordered by
score (descending) and publication time, first forward to the end and then
one page back with the 'before' cursor.

Run against a local server:
    MONGODB_URI=mongodb://localhost:27017 python examples/basic_usage.py
"""

import asyncio
import os
from datetime import datetime, timedelta, timezone

from pymongo import MongoClient

from mongopage import DESC, KeyOrdering, PaginationSession, parse_datetime

KEYS = {
    "primary": KeyOrdering("score", direction=DESC),
    "secondary": KeyOrdering("published_at", coerce=parse_datetime),
}
SECRET = "change-me"


async def fetch_page(collection, cursors=None, limit=4):
    session = PaginationSession(
        filter={"status": "published"},
        paging={"limit": limit, "cursors": cursors},
        secret=SECRET,
        to_entity=lambda doc: f"{doc['title']} (score={doc['score']})",
        **KEYS,
    )
    many = list(collection.find(**session.find_kwargs()))
    return await session.build(many, collection)


async def main():
    client = MongoClient(os.getenv("MONGODB_URI", "mongodb://localhost:27017"))
    collection = client["mongopage_examples"]["articles"]

    # Create test data
    print("Creating test articles...")
    collection.drop()
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    collection.insert_many(
        [
            {
                "title": f"Article {n}",
                "score": n % 4,
                "published_at": start + timedelta(days=n // 3),
                "status": "draft" if n % 7 == 0 else "published",
            }
            for n in range(1, 21)
        ]
    )

    print("\n=== Forward ===")
    page = await fetch_page(collection)
    pages = [page]
    while True:
        print(f"{page.paging.length} of {page.paging.count}: {page.data}")
        if page.paging.next is None:
            break
        page = await fetch_page(collection, {"after": page.paging.next.after})
        pages.append(page)

    print("\n=== One page back ===")
    back = await fetch_page(collection, {"before": page.paging.previous.before})
    print(back.data)
    assert back.data == pages[-2].data

    collection.drop()
    client.close()


if __name__ == "__main__":
    asyncio.run(main())
