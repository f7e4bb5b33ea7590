import pytest

from chapter_resolver.naming import search_term_from_filename


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("The.Matrix.1999.1080p.BluRay.x264.mkv", "The Matrix"),
        ("/media/movies/Blade_Runner_(1982)_Final_Cut.m4v", "Blade Runner"),
        ("1917.2019.2160p.WEB-DL.mp4", "1917"),
        ("Alien", "Alien"),
        ("Mr. Robot", "Mr Robot"),
    ],
)
def test_search_term_from_filename(name: str, expected: str) -> None:
    assert search_term_from_filename(name) == expected
