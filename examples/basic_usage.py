"""
Basic usage example for refminer.

This script demonstrates how to:
1. Wire the pipeline by hand (instead of through the CLI)
2. Find references for a couple of items without writing anything
3. Inspect what would have been cited
"""

import asyncio
import tempfile
from pathlib import Path

import httpx

from refminer.extraction import default_extractor
from refminer.ingest import FetchBatcher, MediaWikiPageRenderer, build_link_client
from refminer.matching import build_matcher_registry, build_type_classifier
from refminer.pipeline import ReferencePipeline
from refminer.storage import DryRunEntityStore, ProcessedLedger, WikibaseEntityStore

USER_AGENT = "refminer example"


async def find_references(entity_ids):
    async with httpx.AsyncClient(headers={"User-Agent": USER_AGENT}, timeout=30.0) as api_client, \
            build_link_client(user_agent=USER_AGENT) as link_client:

        # Dry run: load from Wikidata, but only collect citations locally
        store = DryRunEntityStore(WikibaseEntityStore(api_client))
        pipeline = ReferencePipeline(
            entity_store=store,
            page_renderer=MediaWikiPageRenderer(api_client),
            fetch_batcher=FetchBatcher(link_client, chunk_size=25, concurrency_limit=10),
            extractor=default_extractor(),
            classifier=build_type_classifier(),
            matchers=build_matcher_registry(),
            ledger=ProcessedLedger(str(Path(tempfile.mkdtemp()) / "example-ledger.txt")),
        )
        summary = await pipeline.run(entity_ids)
        return summary, store.saved


def main():
    # A film and a person
    entity_ids = ["Q103474", "Q42"]

    print(f"Looking for references for {', '.join(entity_ids)}...")
    summary, citations = asyncio.run(find_references(entity_ids))

    print("\n" + "="*60)
    print("RUN SUMMARY")
    print("="*60)
    for outcome in summary.outcomes:
        types = ", ".join(sorted(t.value for t in outcome.types)) or "-"
        print(f"  {outcome.entity_id}: {outcome.state.value} [{types}] "
              f"links={outcome.links_harvested} fetched={outcome.links_fetched} "
              f"citations={outcome.citations_added}")

    print("\nWould add:")
    if citations:
        for citation in citations:
            print(f"  {citation.statement_id} ({citation.attribute_key}) <- {citation.source_url}")
    else:
        print("  Nothing found")


if __name__ == "__main__":
    main()
