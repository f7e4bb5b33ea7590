import logging

import pytest

from chapter_resolver.errors import NetworkError, NoChaptersFound, NoResults
from chapter_resolver.provider import ChapterDBClient


def _client(fake_fetcher) -> ChapterDBClient:
    return ChapterDBClient(
        fetcher=fake_fetcher,
        base_url="https://chapterdb.example/",
        user_agent="agent",
        logger=logging.getLogger("test"),
    )


def test_urls_are_built_from_base(fake_fetcher) -> None:
    client = _client(fake_fetcher)
    assert client.search_url("Star Wars: A/B") == (
        "https://chapterdb.example/grid?Title=Star%20Wars%3A%20A%2FB"
    )
    assert client.detail_url(42) == "https://chapterdb.example/browse/42"


def test_search_and_chapters_parse_pages(fake_fetcher) -> None:
    client = _client(fake_fetcher)
    assert [result.title for result in client.search("The Matrix")] == [
        "The Matrix",
        "The Matrix (Extended)",
    ]
    assert [chapter.name for chapter in client.chapters(1001)] == [
        "Intro",
        "Chapter 02",
        "End",
    ]
    assert fake_fetcher.headers[0] == {"User-Agent": "agent"}


def test_typed_failures(fake_fetcher) -> None:
    client = _client(fake_fetcher)
    fake_fetcher.pages[client.search_url("Nothing")] = b"<html></html>"
    fake_fetcher.pages[client.detail_url(7)] = b"<html></html>"
    fake_fetcher.pages[client.detail_url(8)] = b"\xc3\x28"

    with pytest.raises(NoResults):
        client.search("Nothing")
    with pytest.raises(NoChaptersFound):
        client.chapters(7)
    with pytest.raises(NetworkError):
        client.chapters(8)
    with pytest.raises(NetworkError):
        client.chapters(9)
