from __future__ import annotations

import pytest

from core import Reference
from sources.url_filter import is_likely_article, normalize_url, select_candidates, url_key


@pytest.mark.parametrize(
    "url",
    [
        "https://www.google.com/search?q=chatbots",
        "https://duckduckgo.com/?q=chatbots",
        "https://twitter.com/someone/status/1",
        "https://www.youtube.com/watch?v=abc",
        "https://m.facebook.com/page/posts/1",
        "https://www.amazon.com/dp/B000",
        "https://r.jina.ai/https://example.com/post",
    ],
)
def test_denylisted_hosts_are_rejected(url: str) -> None:
    assert is_likely_article(url) is False


@pytest.mark.parametrize(
    "url",
    [
        "https://blog.example.com/tag/ai",
        "https://blog.example.com/category/news/",
        "https://blog.example.com/author/jane",
        "https://blog.example.com/page/2",
        "https://blog.example.com/feed",
        "https://blog.example.com/",
        "https://cdn.example.com/images/cover.png",
        "https://example.com/report.mp4",
    ],
)
def test_non_article_paths_are_rejected(url: str) -> None:
    assert is_likely_article(url) is False


def test_article_urls_are_accepted() -> None:
    assert is_likely_article("https://www.example.com/blog/how-chatbots-help-support")
    assert is_likely_article("http://news.example.org/2024/05/ai-customer-service.html")


def test_origin_hosts_can_be_blocked() -> None:
    url = "https://beyondchats.com/blogs/introduction-to-chatbots/"
    assert is_likely_article(url)
    assert not is_likely_article(url, blocked_hosts=["beyondchats.com"])


def test_classifier_never_raises_on_garbage() -> None:
    for value in ["", "not a url", "ftp://example.com/file", "http://[::1", None]:
        assert is_likely_article(value) is False


def test_normalize_unwraps_google_redirect() -> None:
    wrapped = "https://www.google.com/url?q=https://example.com/guide&sa=U&ved=123"
    assert normalize_url(wrapped) == "https://example.com/guide"


def test_normalize_unwraps_duckduckgo_redirect() -> None:
    wrapped = "https://duckduckgo.com/l/?uddg=https%3A%2F%2Fexample.com%2Fpost%3Fid%3D7&rut=abc"
    assert normalize_url(wrapped) == "https://example.com/post?id=7"


def test_normalize_strips_fragment_tracking_and_punctuation() -> None:
    url = "HTTPS://Example.COM/post?utm_source=x&id=3#comments)."
    assert normalize_url(url) == "https://example.com/post?id=3"


def test_normalize_keeps_balanced_closing_parenthesis() -> None:
    assert normalize_url("https://en.wikipedia.org/wiki/Chatbot_(software)") == (
        "https://en.wikipedia.org/wiki/Chatbot_(software)"
    )
    assert normalize_url("https://en.wikipedia.org/wiki/Chatbot_(software)).") == (
        "https://en.wikipedia.org/wiki/Chatbot_(software)"
    )


def test_normalize_rejects_unusable_urls() -> None:
    assert normalize_url("") is None
    assert normalize_url("mailto:someone@example.com") is None
    assert normalize_url("/relative/path") is None


def test_url_key_ignores_trailing_slash_and_www() -> None:
    assert url_key("https://www.example.com/post/") == url_key("https://example.com/post")


def test_select_candidates_dedupes_and_respects_limit() -> None:
    results = [
        Reference(title="Search", url="https://www.google.com/search?q=x"),
        Reference(title="First", url="https://example.com/first#intro"),
        Reference(title="First again", url="https://example.com/first/"),
        Reference(title="Second", url="https://www.google.com/url?q=https://other.example.org/second"),
        Reference(title="Third", url="https://third.example.net/article"),
    ]

    selected = select_candidates(results, limit=2)

    assert [ref.url for ref in selected] == [
        "https://example.com/first",
        "https://other.example.org/second",
    ]
    assert selected[0].title == "First"


def test_select_candidates_uses_url_when_title_missing() -> None:
    selected = select_candidates([Reference(url="https://example.com/untitled")])
    assert selected[0].title == "https://example.com/untitled"
