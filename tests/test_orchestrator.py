from __future__ import annotations

import json
from typing import Dict, List, Optional

import httpx
import pytest

from config import GeneralSettings, LLMSettings, RunSettings, SearchSettings, Settings
from core import ExtractedContent, OriginalArticle, Reference, RunState, RunStatus, utcnow
from intelligence import ArticleRewriter
from intelligence.llm import BaseLLM, LLMResponse
from orchestrator import RunOrchestrator, RunStatusTracker, build_search_query, run_pipeline
from orchestrator import service
from storage import ArticleStoreClient, StatusFileStore, article_store
from utils.exceptions import ConfigurationError, ExtractionError, RefreshError, SearchError


CANDIDATES = [
    Reference(title="Alpha", url="https://alpha.example.com/post/chatbots"),
    Reference(title="Home", url="https://beyondchats.com/blogs/chatbots/"),
    Reference(title="Beta", url="https://beta.example.org/articles/support-bots"),
    Reference(title="Video", url="https://www.youtube.com/watch?v=1"),
    Reference(title="Gamma", url="https://gamma.example.net/guide"),
]


class _FakeLLM(BaseLLM):
    def __init__(self, reply: str = "<h1>Refreshed</h1><p>Body</p>"):
        super().__init__("fake-model")
        self.reply = reply
        self.prompts = []

    @property
    def provider(self) -> str:
        return "fake"

    async def acomplete(self, messages, **kwargs) -> LLMResponse:
        self.prompts.append(messages[-1].content)
        return LLMResponse(content=self.reply, model=self.model)


class _FakeSearch:
    name = "fake"

    def __init__(self, results: List[Reference], error: Optional[Exception] = None):
        self.results = results
        self.error = error
        self.queries: List[str] = []

    async def search(self, query: str) -> List[Reference]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.results)


class _FakeExtractor:
    def __init__(self, readable: Dict[str, bool]):
        self.readable = readable
        self.calls: List[str] = []

    async def extract(self, url: str) -> ExtractedContent:
        self.calls.append(url)
        if not self.readable.get(url, True):
            raise ExtractionError(f"No extraction tier produced text for {url}", url=url)
        return ExtractedContent(title=f"Page {len(self.calls)}", text=f"Readable text from {url}", url=url)


class _FakeStore:
    def __init__(self, originals: List[OriginalArticle]):
        self.originals = originals
        self.published = []

    async def list_originals(self) -> List[OriginalArticle]:
        return list(self.originals)

    async def publish_updated(self, original, content_html, references) -> Dict:
        self.published.append((original, content_html, list(references)))
        return {"id": 100 + len(self.published)}


class _RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def _original(idx: int = 1, *, updated: int = 0, title: Optional[str] = None) -> OriginalArticle:
    return OriginalArticle(
        id=idx,
        title=title or f"Chatbots Guide {idx} - BeyondChats",
        content_html=f"<p>Original body {idx}</p>",
        updated_articles=[{"id": 900 + n} for n in range(updated)],
    )


def _build(
    *,
    originals: List[OriginalArticle],
    search: Optional[_FakeSearch] = None,
    extractor: Optional[_FakeExtractor] = None,
    llm: Optional[_FakeLLM] = None,
    force: bool = False,
    **run_overrides,
):
    written: List[RunStatus] = []
    tracker = RunStatusTracker(written.append)
    tracker.start()
    sleep = _RecordingSleep()
    store = _FakeStore(originals)
    orchestrator = RunOrchestrator(
        article_store=store,
        search_provider=search or _FakeSearch(CANDIDATES),
        extractor=extractor or _FakeExtractor({}),
        rewriter=ArticleRewriter(llm or _FakeLLM()),
        tracker=tracker,
        run_settings=RunSettings(**run_overrides),
        search_settings=SearchSettings(max_candidates=5),
        force=force,
        sleep=sleep,
    )
    return orchestrator, store, written, sleep


def test_orchestrator_defaults_to_configured_settings(monkeypatch) -> None:
    run_settings = RunSettings(max_originals=1, min_references=3)
    search_settings = SearchSettings(max_candidates=7)
    monkeypatch.setattr(service, "get_run_settings", lambda: run_settings)
    monkeypatch.setattr(service, "get_search_settings", lambda: search_settings)

    orchestrator = RunOrchestrator(
        article_store=_FakeStore([]),
        search_provider=_FakeSearch([]),
        extractor=_FakeExtractor({}),
        rewriter=ArticleRewriter(_FakeLLM()),
        tracker=RunStatusTracker(),
    )

    assert orchestrator.run_settings is run_settings
    assert orchestrator.search_settings is search_settings


def test_build_search_query_strips_brand_suffixes() -> None:
    assert build_search_query("Chatbots 101 - BeyondChats", ["BeyondChats"]) == "Chatbots 101"
    assert build_search_query("Chatbots 101 | beyondchats", ["BeyondChats"]) == "Chatbots 101"
    assert build_search_query("Chatbots 101 – BeyondChats", ["BeyondChats"]) == "Chatbots 101"
    assert build_search_query("  Chatbots   101 ", ["BeyondChats"]) == "Chatbots 101"
    assert build_search_query("BeyondChats", ["BeyondChats"]) == "BeyondChats"


@pytest.mark.asyncio
async def test_skip_if_updated_and_force_override() -> None:
    orchestrator, store, _, _ = _build(originals=[_original(updated=1)])
    summary = await orchestrator.run()

    assert summary.skipped == 1
    assert summary.outcomes[0].reason == "already updated"
    assert orchestrator.search_provider.queries == []
    assert store.published == []

    forced, forced_store, _, _ = _build(originals=[_original(updated=1)], force=True)
    forced_summary = await forced.run()

    assert forced_summary.updated == 1
    assert len(forced_store.published) == 1


@pytest.mark.asyncio
async def test_skip_policy_can_be_disabled() -> None:
    orchestrator, store, _, _ = _build(originals=[_original(updated=2)], skip_if_updated=False)
    summary = await orchestrator.run()
    assert summary.updated == 1


@pytest.mark.parametrize(
    "readable, published, expected_calls",
    [
        ([False, False, False], False, 3),
        ([True, False, False], False, 3),
        ([True, False, True], True, 3),
        ([True, True, True], True, 2),
    ],
)
@pytest.mark.asyncio
async def test_minimum_reference_gate(readable, published, expected_calls) -> None:
    urls = [
        "https://alpha.example.com/post/chatbots",
        "https://beta.example.org/articles/support-bots",
        "https://gamma.example.net/guide",
    ]
    extractor = _FakeExtractor(dict(zip(urls, readable)))
    orchestrator, store, _, _ = _build(originals=[_original()], extractor=extractor)

    summary = await orchestrator.run()

    assert summary.outcomes[0].published is published
    assert len(store.published) == (1 if published else 0)
    assert extractor.calls == urls[:expected_calls]
    if not published:
        assert "not enough readable references" in summary.outcomes[0].reason


@pytest.mark.asyncio
async def test_too_few_candidates_skips_before_extraction() -> None:
    search = _FakeSearch([CANDIDATES[0], CANDIDATES[1], CANDIDATES[3]])
    extractor = _FakeExtractor({})
    orchestrator, _, _, _ = _build(originals=[_original()], search=search, extractor=extractor)

    summary = await orchestrator.run()

    assert summary.skipped == 1
    assert "not enough reference links (1/2)" == summary.outcomes[0].reason
    assert extractor.calls == []


@pytest.mark.asyncio
async def test_search_failure_skips_article_and_batch_continues() -> None:
    search = _FakeSearch(CANDIDATES, error=SearchError("quota exceeded", provider="fake"))
    orchestrator, store, written, _ = _build(originals=[_original(1), _original(2)], search=search)

    summary = await orchestrator.run()

    assert summary.total == 2
    assert summary.skipped == 2
    assert store.published == []
    assert search.queries == ["Chatbots Guide 1", "Chatbots Guide 2"]
    assert written[-1].skipped_count == 2


@pytest.mark.asyncio
async def test_blank_model_output_skips_article() -> None:
    orchestrator, store, _, _ = _build(originals=[_original()], llm=_FakeLLM("  "))
    summary = await orchestrator.run()

    assert summary.skipped == 1
    assert summary.outcomes[0].reason == "model returned no content"
    assert store.published == []


@pytest.mark.asyncio
async def test_batch_is_limited_and_paced() -> None:
    originals = [_original(i) for i in range(1, 5)]
    orchestrator, store, written, sleep = _build(originals=originals, max_originals=3, article_delay_seconds=1.5)

    summary = await orchestrator.run()

    assert summary.total == 3
    assert summary.updated == 3
    assert [item[0].id for item in store.published] == [1, 2, 3]
    assert sleep.delays == [1.5, 1.5, 1.5]

    indices = [status.current_index for status in written]
    assert indices == sorted(indices)
    assert written[-1].total_count == 3
    assert written[-1].updated_count == 3


@pytest.mark.asyncio
async def test_end_to_end_publish_with_references(monkeypatch) -> None:
    posted = []

    async def _fake_get_json(url, *, headers=None, params=None, timeout=None):
        return [{"id": 11, "title": "Support Bots - BeyondChats", "content_html": "<p>Old</p>", "updated_articles": []}]

    async def _fake_post_json(url, payload, *, headers=None, timeout=None):
        posted.append(payload)
        return {"id": 77}

    monkeypatch.setattr(article_store.fetch, "get_json", _fake_get_json)
    monkeypatch.setattr(article_store.fetch, "post_json", _fake_post_json)

    llm = _FakeLLM("```html\n<h1>Support Bots</h1><p>New body</p>\n```")
    written: List[RunStatus] = []
    tracker = RunStatusTracker(written.append)
    tracker.start()
    orchestrator = RunOrchestrator(
        article_store=ArticleStoreClient("http://store.test/api"),
        search_provider=_FakeSearch(CANDIDATES),
        extractor=_FakeExtractor({}),
        rewriter=ArticleRewriter(llm),
        tracker=tracker,
        run_settings=RunSettings(article_delay_seconds=0),
        search_settings=SearchSettings(),
    )

    summary = await orchestrator.run()

    assert summary.updated == 1
    assert summary.outcomes[0].article_id == 77
    payload = posted[0]
    assert payload["title"] == "Support Bots - BeyondChats (Updated)"
    assert payload["original_article_id"] == 11
    html = payload["content_html"]
    assert html.startswith("<article><h1>Support Bots</h1><p>New body</p></article>")
    assert html.count("<li>") == 2
    first = html.index("https://alpha.example.com/post/chatbots")
    second = html.index("https://beta.example.org/articles/support-bots")
    assert first < second
    assert "beyondchats.com" not in html
    assert [ref["url"] for ref in payload["references"]] == [
        "https://alpha.example.com/post/chatbots",
        "https://beta.example.org/articles/support-bots",
    ]
    assert "Reference 1 (Page 1)" in llm.prompts[0]
    assert any("Publishing" in status.message for status in written)


def _settings(tmp_path, **llm) -> Settings:
    return Settings(
        general=GeneralSettings(),
        search=SearchSettings(provider="html"),
        llm=LLMSettings(**{"openai_api_key": None, "hf_api_key": None, **llm}),
        run=RunSettings(status_path=str(tmp_path / "data" / "status.json"), article_delay_seconds=0),
    )


@pytest.mark.asyncio
async def test_missing_credentials_fail_run_before_network(tmp_path, monkeypatch) -> None:
    async def _no_network(*args, **kwargs):
        raise AssertionError("network must not be used")

    monkeypatch.setattr(article_store.fetch, "get_json", _no_network)
    settings = _settings(tmp_path)

    with pytest.raises(ConfigurationError):
        await run_pipeline(settings)

    document = json.loads((tmp_path / "data" / "status.json").read_text(encoding="utf-8"))
    assert document["status"] == "error"
    assert "LLM_OPENAI_API_KEY" in document["message"]
    assert document["finishedAt"]


@pytest.mark.asyncio
async def test_stale_record_without_timezone_does_not_block_run(tmp_path) -> None:
    settings = _settings(tmp_path)
    path = tmp_path / "data" / "status.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"status": "running", "lastUpdatedAt": "2020-01-01T00:00:00"}), encoding="utf-8")

    with pytest.raises(ConfigurationError):
        await run_pipeline(settings)

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["status"] == "error"


@pytest.mark.asyncio
async def test_run_pipeline_refuses_to_overlap_live_run(tmp_path) -> None:
    settings = _settings(tmp_path, openai_api_key="sk-test")
    store = StatusFileStore(settings.run.status_path)
    store.write(RunStatus(status=RunState.RUNNING, started_at=utcnow(), last_updated_at=utcnow()))

    with pytest.raises(RefreshError):
        await run_pipeline(settings, status_store=store)
    assert store.read().status == RunState.RUNNING


@pytest.mark.asyncio
async def test_run_pipeline_success_finalizes_status(tmp_path, monkeypatch) -> None:
    async def _fake_get_json(url, *, headers=None, params=None, timeout=None):
        return [
            {"id": 1, "title": "Fresh One", "content_html": "<p>a</p>", "updated_articles": []},
            {"id": 2, "title": "Done Already", "content_html": "<p>b</p>", "updated_articles": [{"id": 5}]},
        ]

    async def _fake_post_json(url, payload, *, headers=None, timeout=None):
        return {"id": 301}

    monkeypatch.setattr(article_store.fetch, "get_json", _fake_get_json)
    monkeypatch.setattr(article_store.fetch, "post_json", _fake_post_json)
    monkeypatch.setattr(service, "get_llm", lambda settings: _FakeLLM())
    monkeypatch.setattr(service, "get_search_provider", lambda settings, timeout=None: _FakeSearch(CANDIDATES))
    monkeypatch.setattr(service, "ContentExtractor", lambda **kwargs: _FakeExtractor({}))

    settings = _settings(tmp_path)
    summary = await run_pipeline(settings, sleep=_RecordingSleep())

    assert (summary.updated, summary.skipped) == (1, 1)
    status = StatusFileStore(settings.run.status_path).read()
    assert status.status == RunState.SUCCESS
    assert status.total_count == 2
    assert status.current_index == 2
    assert status.updated_count == 1
    assert status.skipped_count == 1
    assert status.message == "Run completed: 1 updated, 1 skipped of 2."


@pytest.mark.asyncio
async def test_publish_error_fails_run(tmp_path, monkeypatch) -> None:
    async def _fake_get_json(url, *, headers=None, params=None, timeout=None):
        return [{"id": 1, "title": "Fresh One", "content_html": "<p>a</p>", "updated_articles": []}]

    async def _fake_post_json(url, payload, *, headers=None, timeout=None):
        raise httpx.ConnectError("store down")

    monkeypatch.setattr(article_store.fetch, "get_json", _fake_get_json)
    monkeypatch.setattr(article_store.fetch, "post_json", _fake_post_json)
    monkeypatch.setattr(service, "get_llm", lambda settings: _FakeLLM())
    monkeypatch.setattr(service, "get_search_provider", lambda settings, timeout=None: _FakeSearch(CANDIDATES))
    monkeypatch.setattr(service, "ContentExtractor", lambda **kwargs: _FakeExtractor({}))

    settings = _settings(tmp_path)
    with pytest.raises(RefreshError):
        await run_pipeline(settings, sleep=_RecordingSleep())

    status = StatusFileStore(settings.run.status_path).read()
    assert status.status == RunState.ERROR
    assert "store down" in status.message
