"""Tests for the WordPress REST API source."""

from datetime import datetime, timezone

import httpx
import pytest
import respx
from httpx import Response

from content_importer.models import ContentType, EntryStatus
from content_importer.sources import WordPressApi
from content_importer.sources.wordpress import PER_PAGE

SITE = "https://wp.example.com"
POSTS_URL = f"{SITE}/wp-json/wp/v2/posts"


def make_post(post_id: int, **overrides):
    post = {
        "id": post_id,
        "date": "2024-01-02T03:04:05",
        "date_gmt": "2024-01-02T03:04:05",
        "guid": {"rendered": f"{SITE}/?p={post_id}"},
        "link": f"{SITE}/2024/post-{post_id}/",
        "status": "publish",
        "title": {"rendered": f"Post {post_id}"},
        "content": {"rendered": f"<p>Body {post_id}</p>"},
        "_embedded": {
            "author": [
                {
                    "name": "Zach",
                    "link": f"{SITE}/author/zach/",
                    "avatar_urls": {
                        "24": "https://gravatar.example/24",
                        "96": "https://gravatar.example/96",
                    },
                }
            ],
            "wp:featuredmedia": [{"source_url": f"{SITE}/uploads/{post_id}.jpg"}],
            "wp:term": [
                [{"taxonomy": "category", "name": "News"}],
                [{"taxonomy": "post_tag", "name": "Eleventy"}],
            ],
        },
    }
    post.update(overrides)
    return post


async def _collect(source, fetcher):
    source.set_fetcher(fetcher)
    source.set_verbose(False)
    return [entry async for entry in source.get_entries()]


class TestWordPressApi:
    """Test cases for WordPressApi."""

    def test_should_build_paginated_urls(self):
        source = WordPressApi(f"{SITE}/")

        assert source.get_page_url(2) == f"{POSTS_URL}?per_page=100&page=2&_embed"
        assert source.get_url() == source.get_page_url(1)

    @pytest.mark.asyncio
    async def test_should_clean_posts(self, fetcher):
        with respx.mock:
            respx.get(POSTS_URL, params={"page": "1"}).mock(
                return_value=Response(200, json=[make_post(1)])
            )

            [entry] = await _collect(WordPressApi(SITE), fetcher)

        assert entry.url == f"{SITE}/2024/post-1/"
        assert entry.title == "Post 1"
        assert entry.content == "<p>Body 1</p>"
        assert entry.content_type == ContentType.HTML
        assert entry.date == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert entry.uuid == f"{SITE}/?p=1"
        assert entry.status == EntryStatus.PUBLISHED
        assert entry.tags == ["News", "Eleventy"]
        assert entry.authors == [
            {
                "name": "Zach",
                "url": f"{SITE}/author/zach/",
                "avatar_url": "https://gravatar.example/96",
            }
        ]
        assert entry.media == {"featuredImage": f"{SITE}/uploads/1.jpg"}

    @pytest.mark.asyncio
    async def test_should_mark_drafts(self, fetcher):
        draft = make_post(7, status="draft", link=f"{SITE}/?p=7")

        with respx.mock:
            respx.get(POSTS_URL, params={"page": "1"}).mock(
                return_value=Response(200, json=[draft])
            )

            [entry] = await _collect(WordPressApi(SITE), fetcher)

        assert entry.status == EntryStatus.DRAFT
        assert entry.is_draft is True

    @pytest.mark.asyncio
    async def test_should_follow_pages_until_a_short_page(self, fetcher):
        first_page = [make_post(i) for i in range(PER_PAGE)]

        with respx.mock:
            page_1 = respx.get(POSTS_URL, params={"page": "1"}).mock(
                return_value=Response(200, json=first_page)
            )
            page_2 = respx.get(POSTS_URL, params={"page": "2"}).mock(
                return_value=Response(200, json=[make_post(1000)])
            )

            entries = await _collect(WordPressApi(SITE), fetcher)

        assert len(entries) == PER_PAGE + 1
        assert page_1.call_count == 1
        assert page_2.call_count == 1

    @pytest.mark.asyncio
    async def test_should_stop_at_bad_request_past_the_last_page(self, fetcher):
        first_page = [make_post(i) for i in range(PER_PAGE)]

        with respx.mock:
            respx.get(POSTS_URL, params={"page": "1"}).mock(
                return_value=Response(200, json=first_page)
            )
            respx.get(POSTS_URL, params={"page": "2"}).mock(
                return_value=Response(400, json={"code": "rest_post_invalid_page_number"})
            )

            entries = await _collect(WordPressApi(SITE), fetcher)

        assert len(entries) == PER_PAGE

    @pytest.mark.asyncio
    async def test_should_raise_when_first_page_fails(self, fetcher):
        with respx.mock:
            respx.get(POSTS_URL, params={"page": "1"}).mock(return_value=Response(403))

            with pytest.raises(httpx.HTTPStatusError):
                await _collect(WordPressApi(SITE), fetcher)

    @pytest.mark.asyncio
    async def test_should_reject_unexpected_responses(self, fetcher):
        with respx.mock:
            respx.get(POSTS_URL, params={"page": "1"}).mock(
                return_value=Response(200, json={"message": "not a list"})
            )

            with pytest.raises(ValueError, match="Unexpected WordPress response"):
                await _collect(WordPressApi(SITE), fetcher)
