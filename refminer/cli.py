"""Command-line entry point: wire the collaborators and run the pipeline."""

import argparse
import asyncio
import logging
from typing import List, Mapping, Optional

import httpx

from refminer.config import ReferencerConfig
from refminer.errors import AuthenticationError, ConfigurationError
from refminer.extraction import default_extractor
from refminer.ingest import FetchBatcher, MediaWikiPageRenderer, build_link_client
from refminer.matching import (
    GENRE_VOCABULARY_CLASS,
    build_alias_table,
    build_matcher_registry,
    build_type_classifier,
    load_vocabulary,
)
from refminer.pipeline import EntityState, ReferencePipeline, RunSummary
from refminer.query import SparqlQueryRunner
from refminer.storage import (
    BaseEntityStore,
    CitationStore,
    DryRunEntityStore,
    ProcessedLedger,
    WikibaseEntityStore,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refminer",
        description="Add references to Wikidata items from structured data on pages linked from their articles",
    )
    parser.add_argument("--item", help="Single entity id to process (e.g., Q42)")
    parser.add_argument(
        "--sparql", action="append", default=[],
        help="SPARQL query part such as P31:Q11424 (repeatable, combined with AND)",
    )
    parser.add_argument("--force", action="store_true", help="Reprocess entities already in the ledger")
    parser.add_argument("--dry-run", action="store_true", help="Find citations but do not write them")
    parser.add_argument("--citation-db", help="DuckDB file logging every saved citation")
    parser.add_argument("--genres", help="JSON file of {genre id: label} instead of querying the genre vocabulary")
    parser.add_argument("--ledger", help="Processed-entity ledger path")
    parser.add_argument("--concurrency", type=int, help="Maximum concurrent link requests")
    parser.add_argument("--chunk-size", type=int, help="Links per fetch chunk")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bars")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


async def load_genre_vocabulary(config: ReferencerConfig, query_runner: SparqlQueryRunner) -> Mapping[str, str]:
    """Genre labels from the configured file, else from the query service."""
    if config.genre_vocabulary_path:
        return load_vocabulary(config.genre_vocabulary_path)
    try:
        return await query_runner.get_ids_and_labels_for_instance_of(GENRE_VOCABULARY_CLASS)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Could not load genre vocabulary, genres will match literally only: {e}")
        return {}


async def select_entities(args: argparse.Namespace, query_runner: SparqlQueryRunner) -> List[str]:
    if args.item:
        logger.info("Using item passed in --item")
        return [args.item]
    logger.info("Using items from SPARQL query (running)")
    return await query_runner.get_entity_ids_for_query_parts(args.sparql)


async def run(config: ReferencerConfig, args: argparse.Namespace) -> RunSummary:
    """
    Build every collaborator and run the pipeline.

    Raises:
        AuthenticationError: If login fails
        httpx.HTTPError: If entity selection fails
    """
    headers = {"User-Agent": config.user_agent}
    async with httpx.AsyncClient(headers=headers, timeout=30.0) as api_client, \
            build_link_client(config.connect_timeout, config.request_timeout, config.user_agent) as link_client:

        query_runner = SparqlQueryRunner(api_client, config.sparql_url)
        entity_ids = await select_entities(args, query_runner)

        vocabulary = await load_genre_vocabulary(config, query_runner)
        matchers = build_matcher_registry(genre_aliases=build_alias_table(vocabulary))

        wikibase = WikibaseEntityStore(api_client, config.api_url)
        store: BaseEntityStore = wikibase
        if config.dry_run:
            store = DryRunEntityStore(wikibase)
        else:
            await wikibase.login(config.username, config.password)

        citation_store = CitationStore(config.citation_db_path) if config.citation_db_path else None
        pipeline = ReferencePipeline(
            entity_store=store,
            page_renderer=MediaWikiPageRenderer(api_client),
            fetch_batcher=FetchBatcher(
                link_client,
                chunk_size=config.chunk_size,
                concurrency_limit=config.concurrency_limit,
                request_timeout=config.request_timeout,
            ),
            extractor=default_extractor(),
            classifier=build_type_classifier(),
            matchers=matchers,
            ledger=ProcessedLedger(config.ledger_path),
            citation_store=citation_store,
            show_progress=not args.no_progress,
        )
        try:
            return await pipeline.run(entity_ids, force=args.force)
        finally:
            if citation_store is not None:
                citation_store.close()


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger("refminer").setLevel(logging.DEBUG)

    config = ReferencerConfig.from_env(
        ledger_path=args.ledger,
        chunk_size=args.chunk_size,
        concurrency_limit=args.concurrency,
        citation_db_path=args.citation_db,
        genre_vocabulary_path=args.genres,
        dry_run=True if args.dry_run else None,
    )
    logger.info(f"Ledger file: {config.ledger_path}")

    try:
        config.validate()
        if not args.item and not args.sparql:
            raise ConfigurationError("You must pass --item or at least one --sparql query part")
        summary = asyncio.run(run(config, args))
    except (ConfigurationError, AuthenticationError) as e:
        logger.error(str(e))
        return 1
    except httpx.HTTPError as e:
        logger.error(f"Entity selection failed: {e}")
        return 1

    print(f"{summary.citations_added} references added across {len(summary.outcomes)} entities "
          f"({summary.count(EntityState.SAVED)} saved, {summary.count(EntityState.SKIPPED)} already done)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
