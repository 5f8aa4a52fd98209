"""Reference discovery pipeline: the per-entity orchestration."""

import asyncio
import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional

from tqdm import tqdm

from refminer.extraction import BaseRecordExtractor
from refminer.ingest import FetchBatcher, FetchResult, MediaWikiPageRenderer, harvest_links
from refminer.matching import MatcherRegistry, SemanticType, TypeClassifier
from refminer.models import Entity
from refminer.storage import BaseEntityStore, CitationStore, ProcessedLedger

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class EntityState(str, Enum):
    """Where an entity ended up. Everything except SAVED is a skip or failure."""
    SKIPPED = "skipped"
    LOAD_FAILED = "load_failed"
    NO_TYPE = "no_type"
    NO_LINKS = "no_links"
    SAVE_FAILED = "save_failed"
    SAVED = "saved"


@dataclass
class EntityOutcome:
    """Result of processing one entity."""
    entity_id: str
    state: EntityState
    types: FrozenSet[SemanticType] = frozenset()
    links_harvested: int = 0
    links_fetched: int = 0
    links_failed: int = 0
    citations_added: int = 0


@dataclass
class RunSummary:
    """Aggregated outcomes of a run."""
    outcomes: List[EntityOutcome] = field(default_factory=list)

    def count(self, state: EntityState) -> int:
        return sum(1 for o in self.outcomes if o.state == state)

    @property
    def citations_added(self) -> int:
        return sum(o.citations_added for o in self.outcomes if o.state == EntityState.SAVED)

    def to_dict(self) -> Dict[str, int]:
        counts = Counter(o.state.value for o in self.outcomes)
        return {
            "entities": len(self.outcomes),
            "citations_added": self.citations_added,
            **{state.value: counts.get(state.value, 0) for state in EntityState},
        }


class ReferencePipeline:
    """
    Find citations for entity attributes on pages linked from their articles.

    For each entity, strictly one after another:
    1. Skip if already in the processed ledger (unless forced)
    2. Load the entity
    3. Classify it; no known type means nothing to do
    4. Render its wiki pages concurrently and harvest their external links
    5. Drop archive links, normalize, deduplicate, shuffle
    6. Fetch the links in bounded-concurrency chunks
    7. Extract records from each page and run the matchers of each type
    8. Save staged citations, then mark the entity processed
    """

    def __init__(
        self,
        entity_store: BaseEntityStore,
        page_renderer: MediaWikiPageRenderer,
        fetch_batcher: FetchBatcher,
        extractor: BaseRecordExtractor,
        classifier: TypeClassifier,
        matchers: MatcherRegistry,
        ledger: ProcessedLedger,
        citation_store: Optional[CitationStore] = None,
        concurrency_limit: Optional[int] = None,
        site_suffix: str = "wiki",
        rng: Optional[random.Random] = None,
        show_progress: bool = True
    ):
        """
        Initialize the pipeline.

        Args:
            entity_store: Loads entities and saves citations
            page_renderer: Renders wiki pages to their external links
            fetch_batcher: Retrieves external links
            extractor: Turns page markup into MicroRecords
            classifier: Maps entities to SemanticTypes
            matchers: SemanticType -> matchers (see build_matcher_registry)
            ledger: Processed-entity ledger
            citation_store: Optional local log of saved citations
            concurrency_limit: Maximum in-flight link requests (default: batcher's)
            site_suffix: Only sitelinks whose site id ends with this are rendered
            rng: Random source for shuffling (seed it for reproducible runs)
            show_progress: Show tqdm progress bars
        """
        self.entity_store = entity_store
        self.page_renderer = page_renderer
        self.fetch_batcher = fetch_batcher
        self.extractor = extractor
        self.classifier = classifier
        self.matchers = matchers
        self.ledger = ledger
        self.citation_store = citation_store
        self.concurrency_limit = concurrency_limit
        self.site_suffix = site_suffix
        self.rng = rng or random.Random()
        self.show_progress = show_progress

    async def run(self, entity_ids: Iterable[str], force: bool = False) -> RunSummary:
        """
        Process entities sequentially, in random order.

        Args:
            entity_ids: Entities to process
            force: Reprocess entities already in the ledger

        Returns:
            RunSummary
        """
        ids = list(dict.fromkeys(entity_ids))
        self.rng.shuffle(ids)
        logger.info(f"Got {len(ids)} entities to investigate")

        summary = RunSummary()
        for entity_id in ids:
            outcome = await self.process_entity(entity_id, force=force)
            summary.outcomes.append(outcome)

        logger.info(f"Run finished: {summary.to_dict()}")
        return summary

    async def process_entity(self, entity_id: str, force: bool = False) -> EntityOutcome:
        """
        Run every stage for one entity.

        Per-entity failures end in a terminal state; nothing raises out.

        Args:
            entity_id: Entity to process
            force: Ignore the processed ledger

        Returns:
            EntityOutcome
        """
        # 1. Ledger check, before any network activity
        if not force and entity_id in self.ledger:
            logger.info(f"{entity_id}: already processed")
            return EntityOutcome(entity_id, EntityState.SKIPPED)

        # 2. Load
        logger.info(f"{entity_id}: loading entity")
        try:
            entity = await self.entity_store.load(entity_id)
        except Exception as e:
            logger.error(f"{entity_id}: failed to load entity: {e}")
            return EntityOutcome(entity_id, EntityState.LOAD_FAILED)

        # 3. Classify
        types = self.classifier.classify(entity)
        if not types:
            logger.info(f"{entity_id}: no useful instance-of values")
            return EntityOutcome(entity_id, EntityState.NO_TYPE)

        # 4-5. Harvest, normalize, dedupe
        raw_links = await self.harvest_raw_links(entity)
        links = harvest_links(raw_links)
        self.rng.shuffle(links)
        outcome = EntityOutcome(entity_id, EntityState.NO_LINKS, types=types, links_harvested=len(links))
        logger.info(f"{entity_id}: {len(links)} external links to fetch")
        if not links:
            return outcome

        # 6. Fetch
        pages = await self.fetch_pages(entity_id, links, outcome)

        # 7. Match
        outcome.citations_added = self.match_pages(entity, types, pages)
        logger.info(f"{entity_id}: {outcome.citations_added} references added")

        # 8. Save and mark
        return await self.save_entity(entity, outcome)

    async def harvest_raw_links(self, entity: Entity) -> List[str]:
        """
        Render every wiki sitelink concurrently and collect external links.

        A page that fails to render is logged and contributes nothing.

        Args:
            entity: Loaded entity

        Returns:
            Raw links from all rendered pages
        """
        sitelinks = {
            site_id: title
            for site_id, title in entity.sitelinks.items()
            if site_id.endswith(self.site_suffix)
        }
        logger.info(f"{entity.entity_id}: {len(sitelinks)} wiki pages to render")
        if not sitelinks:
            return []

        with tqdm(total=len(sitelinks), desc=f"{entity.entity_id} pages",
                  disable=not self.show_progress, leave=False) as progress:

            async def render(site_id: str, title: str) -> List[str]:
                try:
                    page = await self.page_renderer.render(site_id, title)
                    return page.outbound_links
                except Exception as e:
                    logger.warning(f"{entity.entity_id}: {e}")
                    return []
                finally:
                    progress.update(1)

            link_lists = await asyncio.gather(
                *(render(site_id, title) for site_id, title in sitelinks.items())
            )

        return [link for links in link_lists for link in links]

    async def fetch_pages(self, entity_id: str, links: List[str], outcome: EntityOutcome) -> Dict[str, FetchResult]:
        """
        Fetch links and map effective URL -> result for successes only.

        Args:
            entity_id: Entity being processed (for progress display)
            links: Normalized, distinct links
            outcome: Updated with fetched/failed counts

        Returns:
            Effective URL -> successful FetchResult
        """
        with tqdm(total=len(links), desc=f"{entity_id} links",
                  disable=not self.show_progress, leave=False) as progress:
            results = await self.fetch_batcher.fetch_all(
                links,
                concurrency_limit=self.concurrency_limit,
                on_result=lambda _: progress.update(1),
            )

        pages = {r.effective_url: r for r in results if r.ok}
        outcome.links_fetched = sum(1 for r in results if r.ok)
        outcome.links_failed = len(results) - outcome.links_fetched
        if outcome.links_failed:
            logger.info(f"{entity_id}: {outcome.links_failed} links failed to fetch")
        return pages

    def match_pages(self, entity: Entity, types: FrozenSet[SemanticType], pages: Dict[str, FetchResult]) -> int:
        """
        Run the matchers of every type against every record on every page.

        Args:
            entity: Entity receiving staged citations
            types: Entity's SemanticTypes
            pages: Source URL -> fetched page

        Returns:
            Number of citations staged
        """
        added = 0
        for link, page in pages.items():
            try:
                records = self.extractor.extract(page.content)
            except Exception as e:
                logger.warning(f"{entity.entity_id}: failed to extract data from {link}: {e}")
                continue

            for record in records:
                for semantic_type in types:
                    if not record.has_type(semantic_type.value):
                        continue
                    for matcher in self.matchers.get(semantic_type, ()):
                        added += matcher.add_references(record, entity, link, page.fetched_at)
        return added

    async def save_entity(self, entity: Entity, outcome: EntityOutcome) -> EntityOutcome:
        """
        Persist staged citations and mark the entity processed on success.

        Entities with nothing staged are marked processed without a save.
        After a partial save, the citations the store did write (those no
        longer pending) are still recorded in the citation log.
        """
        staged = list(entity.pending_citations)
        if staged:
            try:
                saved = await self.entity_store.save(entity)
            except Exception as e:
                logger.error(f"{entity.entity_id}: failed to save citations: {e}")
                saved = False

            written = staged
            if not saved:
                still_pending = {c.citation_id for c in entity.pending_citations}
                written = [c for c in staged if c.citation_id not in still_pending]

            if written and self.citation_store is not None:
                self.citation_store.record_citations(written)

            if not saved:
                logger.error(
                    f"{entity.entity_id}: {len(staged) - len(written)}/{len(staged)} citations not saved, "
                    f"leaving unprocessed"
                )
                outcome.state = EntityState.SAVE_FAILED
                return outcome

        self.ledger.mark_processed(entity.entity_id)
        outcome.state = EntityState.SAVED
        return outcome
