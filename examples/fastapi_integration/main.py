"""
FastAPI Integration Example

Demonstrates that mongopage request and response models work as Pydantic
models in FastAPI, with pymongo's async client doing the fetch and the
counts.

Run with:
    MONGOPAGE_SECRET=change-me uvicorn examples.fastapi_integration.main:app
"""

import os
from datetime import datetime

from bson import ObjectId
from fastapi import FastAPI, HTTPException, Query, status
from pydantic import BaseModel
from pymongo import AsyncMongoClient

from mongopage import (
    DESC,
    CursorInput,
    KeyOrdering,
    Page,
    PageNumberSession,
    PageWindow,
    PaginationSession,
    PagingInput,
    PagingOptions,
    UsageError,
    parse_datetime,
)


class Article(BaseModel):
    """Article as returned by the API"""

    id: str
    title: str
    score: int
    published_at: datetime


def to_article(document: dict) -> Article:
    return Article(
        id=str(document["_id"]),
        title=document["title"],
        score=document["score"],
        published_at=document["published_at"],
    )


client = AsyncMongoClient(os.getenv("MONGODB_URI", "mongodb://localhost:27017"))
articles = client["mongopage_examples"]["articles"]
options = PagingOptions.from_env()

app = FastAPI(title="mongopage + FastAPI Example")


@app.get("/articles", response_model=Page[Article])
async def list_articles(
    limit: int = Query(20, ge=1, le=100),
    after: str | None = None,
    before: str | None = None,
    search: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
) -> Page[Article]:
    """List articles, newest first"""
    try:
        session = PaginationSession(
            filter={"status": status_filter} if status_filter else {},
            paging=PagingInput(limit=limit, cursors=CursorInput(after=after, before=before)),
            search=search,
            primary=KeyOrdering("published_at", coerce=parse_datetime, direction=DESC),
            to_entity=to_article,
            options=options,
        )
    except UsageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e

    many = await articles.find(**session.find_kwargs()).to_list()
    return await session.build(many, articles)


@app.get("/articles/pages", response_model=PageWindow)
async def article_pages(size: int = 10, offset: int = 0) -> PageWindow:
    """Page-number navigation for the article list"""
    session = PageNumberSession(paging=PagingInput(size=size, offset=offset), options=options)
    many = await articles.find(session.filter).skip(session.skip).limit(session.limit).to_list()
    return await session.build(many, articles)


@app.get("/articles/{article_id}", response_model=Article)
async def get_article(article_id: str) -> Article:
    """Get an article by ID"""
    if not ObjectId.is_valid(article_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid article id")
    document = await articles.find_one({"_id": ObjectId(article_id)})
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Article '{article_id}' not found"
        )
    return to_article(document)
