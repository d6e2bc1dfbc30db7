"""Run orchestrator: sequences search, extraction, rewrite and publish per original."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from config import RunSettings, SearchSettings, Settings, get_run_settings, get_search_settings, get_settings
from core import ArticleOutcome, ExtractedContent, OriginalArticle, Reference, RunState, RunSummary
from intelligence import ArticleRewriter, get_llm
from processing import assemble_article, clean_text
from scrapers import BaseSearchProvider, get_search_provider
from sources import ContentExtractor, select_candidates
from storage import ArticleStoreClient, StatusFileStore, is_stale
from utils.exceptions import ExtractionError, RefreshError

from .store import RunStatusTracker


logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]

TITLE_SEPARATORS = (" - ", " | ", " – ")


def build_search_query(title: str, suffixes: Sequence[str] = ()) -> str:
    """Article title without trailing brand suffixes such as ' | Brand'."""
    query = clean_text(title)
    stripped = True
    while stripped:
        stripped = False
        for suffix in suffixes:
            for separator in TITLE_SEPARATORS:
                tail = f"{separator}{suffix}".lower()
                if query.lower().endswith(tail):
                    query = query[: -len(tail)].rstrip()
                    stripped = True
    return query or clean_text(title)


class RunOrchestrator:
    """Processes a batch of originals strictly one at a time."""

    def __init__(
        self,
        *,
        article_store: ArticleStoreClient,
        search_provider: BaseSearchProvider,
        extractor: ContentExtractor,
        rewriter: ArticleRewriter,
        tracker: RunStatusTracker,
        run_settings: Optional[RunSettings] = None,
        search_settings: Optional[SearchSettings] = None,
        force: bool = False,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.article_store = article_store
        self.search_provider = search_provider
        self.extractor = extractor
        self.rewriter = rewriter
        self.tracker = tracker
        self.run_settings = run_settings or get_run_settings()
        self.search_settings = search_settings or get_search_settings()
        self.force = force
        self._sleep = sleep

    async def run(self, originals: Optional[List[OriginalArticle]] = None) -> RunSummary:
        """Process up to max_originals articles and return the per-item outcomes."""
        if originals is None:
            self.tracker.note("Loading original articles.")
            originals = await self.article_store.list_originals()

        batch = originals[: max(0, self.run_settings.max_originals)]
        self.tracker.set_total(len(batch))
        summary = RunSummary(total=len(batch))

        for index, original in enumerate(batch, 1):
            self.tracker.begin_item(index, original.title)
            outcome = await self.process_article(original)
            summary.outcomes.append(outcome)

            if outcome.published:
                summary.updated += 1
                self.tracker.record_updated(original.title)
            else:
                summary.skipped += 1
                self.tracker.record_skipped(original.title, outcome.reason)

            if outcome.published and self.run_settings.article_delay_seconds > 0:
                await self._sleep(self.run_settings.article_delay_seconds)

        logger.info(
            "Run finished: %d processed, %d updated, %d skipped",
            summary.total,
            summary.updated,
            summary.skipped,
        )
        return summary

    async def process_article(self, original: OriginalArticle) -> ArticleOutcome:
        """
        Run one original through the pipeline.

        Recoverable problems (already updated, search failure, too few
        references) produce an unpublished outcome. Rewrite and publish
        errors propagate.
        """
        min_refs = self.run_settings.min_references

        if original.updated_count > 0 and self.run_settings.skip_if_updated and not self.force:
            return self._skip(original, "already updated")

        query = build_search_query(original.title, self.run_settings.title_suffixes)
        self.tracker.note(f"Searching references for '{query}'.")
        candidates = await self.find_candidates(query)
        if len(candidates) < min_refs:
            return self._skip(original, f"not enough reference links ({len(candidates)}/{min_refs})")

        self.tracker.note(f"Extracting content from {len(candidates)} candidate link(s).")
        extracted = await self.extract_references(candidates, min_refs)
        if len(extracted) < min_refs:
            return self._skip(original, f"not enough readable references ({len(extracted)}/{min_refs})")

        self.tracker.note(f"Generating updated article for '{original.title}'.")
        model_html = await self.rewriter.rewrite(original, extracted)
        if not model_html.strip():
            return self._skip(original, "model returned no content")

        references = [item.as_reference() for item in extracted]
        final_html = assemble_article(model_html, references)

        self.tracker.note(f"Publishing updated article for '{original.title}'.")
        created = await self.article_store.publish_updated(original, final_html, references)

        return ArticleOutcome(
            original_id=original.id,
            title=original.title,
            published=True,
            references=references,
            article_id=created.get("id"),
        )

    async def find_candidates(self, query: str) -> List[Reference]:
        blocked = list(self.run_settings.origin_hosts)
        try:
            results = await self.search_provider.search(query)
        except Exception as exc:
            logger.warning("Search failed for '%s': %s", query, exc)
            return []
        return select_candidates(results, limit=self.search_settings.max_candidates, blocked_hosts=blocked)

    async def extract_references(self, candidates: Sequence[Reference], needed: int) -> List[ExtractedContent]:
        """Extract candidates in order until enough succeed."""
        extracted: List[ExtractedContent] = []
        for candidate in candidates:
            if len(extracted) >= needed:
                break
            try:
                content = await self.extractor.extract(candidate.url)
            except ExtractionError as exc:
                logger.warning("Extraction failed for %s: %s", candidate.url, exc)
                continue
            if not content.title:
                content = content.model_copy(update={"title": candidate.title})
            extracted.append(content)
        return extracted

    def _skip(self, original: OriginalArticle, reason: str) -> ArticleOutcome:
        logger.info("Skipping '%s' (%s)", original.title, reason)
        return ArticleOutcome(original_id=original.id, title=original.title, published=False, reason=reason)


def _finalize_error(tracker: RunStatusTracker, message: str) -> None:
    try:
        tracker.fail(message)
    except (OSError, ValueError) as exc:
        logger.error("Could not record run failure: %s", exc)


async def run_pipeline(
    settings: Optional[Settings] = None,
    *,
    force: bool = False,
    status_store: Optional[StatusFileStore] = None,
    sleep: SleepFunc = asyncio.sleep,
) -> RunSummary:
    """
    Wire the components from settings and execute one run.

    The status record goes to running first; the credential check happens
    before any network call. Any exception finalizes the status as error and
    is re-raised.
    """
    settings = settings or get_settings()
    status_store = status_store or StatusFileStore(settings.run.status_path)

    previous = status_store.read()
    if (
        previous is not None
        and previous.status == RunState.RUNNING
        and not is_stale(previous, settings.run.status_max_age_seconds)
    ):
        raise RefreshError(
            "Another run is already in progress.",
            {"startedAt": previous.to_document().get("startedAt")},
        )

    tracker = RunStatusTracker(status_store.write)
    tracker.start(message="Run started.")

    rewriter: Optional[ArticleRewriter] = None
    try:
        llm = get_llm(settings.llm)
        rewriter = ArticleRewriter(
            llm,
            original_max_chars=settings.llm.original_max_chars,
            reference_max_chars=settings.llm.reference_max_chars,
        )
        timeout = settings.general.request_timeout
        orchestrator = RunOrchestrator(
            article_store=ArticleStoreClient(settings.article_store.base_url, timeout=timeout),
            search_provider=get_search_provider(settings.search, timeout=timeout),
            extractor=ContentExtractor(proxy_base_url=settings.search.proxy_base_url, timeout=timeout),
            rewriter=rewriter,
            tracker=tracker,
            run_settings=settings.run,
            search_settings=settings.search,
            force=force,
            sleep=sleep,
        )
        summary = await orchestrator.run()
    except Exception as exc:
        logger.exception("Run failed")
        _finalize_error(tracker, f"Run failed: {exc}")
        raise
    finally:
        if rewriter is not None:
            await rewriter.aclose()

    tracker.complete(
        f"Run completed: {summary.updated} updated, {summary.skipped} skipped of {summary.total}."
    )
    return summary
