"""Command line interface for the F1 question-answering service.

Usage:
    f1rag ask "Who is Max Verstappen?" [--show-confidence]
    f1rag health
    f1rag validate
    f1rag smoke [--limit N]
"""

import argparse
import asyncio
import logging
import re
import time
from typing import Optional

import yaml

from .document import RAGResponse
from .exceptions import F1RAGError
from .service import F1RAGService
from .utils.config import load_config
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)

SAMPLE_QUERY = "What is Formula 1?"
SMOKE_QUERIES = [
    "Who is the current Formula 1 World Champion?",
    "Which F1 team has the fastest car this season?",
    "Tell me about Lewis Hamilton's career",
    "What are the F1 technical regulations for 2024?",
    "Which circuits are new to F1 this season?",
    "Compare Hamilton vs Verstappen career stats",
    "When is the next Formula 1 race?",
    "What is DRS in Formula 1?",
    "Tell me about Formula 1 history",
    "What are the current constructor standings?",
]
MIN_MEANINGFUL_ANSWER_LENGTH = 50
PREVIEW_LENGTH = 100
SNIPPET_LENGTH = 150
APOLOGY = (
    "I apologize, but I'm having trouble accessing my F1 knowledge base right now. "
    "Please try again later."
)

_SCHEME = re.compile(r"^https?://")


def source_domain(source: str) -> str:
    """Shorten a source URL to its host: scheme stripped, path dropped."""
    return _SCHEME.sub("", source).split("/")[0]


def format_answer(response: RAGResponse, show_confidence: bool = False) -> str:
    """Render a response for the terminal.

    Args:
        response: Response returned by the service
        show_confidence: Append the confidence percentage

    Returns:
        Answer text followed by a numbered source list when there are sources
    """
    text = response.answer

    if response.sources:
        lines = [f"{i + 1}. {source_domain(source)}" for i, source in enumerate(response.sources)]
        text += "\n\n📚 **Sources:**\n" + "\n".join(lines)

    if show_confidence:
        text += f"\n\n🔍 *RAG Mode - Confidence: {response.confidence * 100:.1f}%*"

    return text


async def run_ask(service: F1RAGService, query: str, show_confidence: bool = False) -> int:
    try:
        response = await service.answer(query)
    except F1RAGError as e:
        logger.error(f"Query failed ({e.kind}): {e.message}")
        print(APOLOGY)
        return 1

    print(format_answer(response, show_confidence))
    return 0


async def run_health(service: F1RAGService) -> int:
    healthy = await service.health_check()
    print("RAG service is healthy" if healthy else "RAG service is unhealthy")
    return 0 if healthy else 1


async def run_validate(service: F1RAGService) -> int:
    """Health check followed by one sample query, with a short report."""
    print("Validating RAG system...")

    if not await service.health_check():
        print("❌ Health check failed")
        return 1
    print("✅ Health check passed")

    print(f"Testing sample query: {SAMPLE_QUERY!r}")
    started = time.perf_counter()
    try:
        response = await service.answer(SAMPLE_QUERY)
    except F1RAGError as e:
        print(f"❌ Sample query failed ({e.kind}): {e.message}")
        return 1
    elapsed_ms = (time.perf_counter() - started) * 1000

    print(f"✅ Query completed in {elapsed_ms:.0f}ms")
    print(f"   Outcome: {response.outcome.value}")
    print(f"   Confidence: {response.confidence * 100:.1f}%")
    print(f"   Retrieved documents: {len(response.retrieved_docs)}")
    print(f"   Sources: {len(response.sources)}")

    if len(response.answer) > MIN_MEANINGFUL_ANSWER_LENGTH:
        print("✅ Generated meaningful response")
        print(f"   Preview: {response.answer[:PREVIEW_LENGTH]}...")
    else:
        print("⚠️  Response seems too short or generic")
    return 0


async def run_smoke(service: F1RAGService, limit: int = 3) -> int:
    """Run the first ``limit`` sample queries and print a full report for each.

    A failing query is reported and the run continues; the exit code is 1
    if the service is unhealthy or any query failed.
    """
    if not await service.health_check():
        print("❌ Health check failed")
        return 1
    print("✅ Health check passed")

    failures = 0
    for i, query in enumerate(SMOKE_QUERIES[:limit]):
        print(f"\n🔍 Query {i + 1}: {query!r}")
        print("=" * 51)

        started = time.perf_counter()
        try:
            response = await service.answer(query)
        except F1RAGError as e:
            print(f"❌ Query failed ({e.kind}): {e.message}")
            failures += 1
            continue
        elapsed_ms = (time.perf_counter() - started) * 1000

        print(f"⏱️  Response time: {elapsed_ms:.0f}ms")
        print(f"🎯 Confidence: {response.confidence * 100:.1f}%")
        print(f"📄 Retrieved docs: {len(response.retrieved_docs)}")
        print(f"🔗 Sources: {len(response.sources)}")
        print()
        print(format_answer(response))

        if response.retrieved_docs:
            print("\n🔍 **Top Retrieved Snippets:**")
            for j, doc in enumerate(response.retrieved_docs[:2]):
                print(f"{j + 1}. [{doc.similarity:.3f}] {doc.text[:SNIPPET_LENGTH]}...")

    print("\n" + "-" * 60)
    print(f"Completed {limit - failures}/{limit} queries")
    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="f1rag",
        description="Answer Formula 1 questions from a vector store of F1 passages",
    )
    parser.add_argument("--config", default=None, help="Path to a YAML or JSON config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    ask = subparsers.add_parser("ask", help="Answer a single question")
    ask.add_argument("query", help="Question about Formula 1")
    ask.add_argument(
        "--show-confidence",
        action="store_true",
        help="Print the confidence score after the answer",
    )

    subparsers.add_parser("health", help="Check the embedding model and vector store")
    subparsers.add_parser("validate", help="Health check plus a sample query")

    smoke = subparsers.add_parser("smoke", help="Run a batch of sample F1 queries")
    smoke.add_argument(
        "--limit",
        type=int,
        default=3,
        choices=range(1, len(SMOKE_QUERIES) + 1),
        metavar="N",
        help=f"Number of sample queries to run (1-{len(SMOKE_QUERIES)}, default: 3)",
    )

    return parser


def main(argv: Optional[list[str]] = None, service: Optional[F1RAGService] = None) -> int:
    """Entry point for the ``f1rag`` console script.

    Args:
        argv: Arguments to parse (default: ``sys.argv[1:]``)
        service: Service to use instead of one built from the config file

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Could not load config: {e}")
        return 1

    setup_logging(config.log_level, verbose=args.verbose)

    if service is None:
        service = F1RAGService.from_config(config)

    if args.command == "ask":
        return asyncio.run(run_ask(service, args.query, args.show_confidence))
    if args.command == "health":
        return asyncio.run(run_health(service))
    if args.command == "smoke":
        return asyncio.run(run_smoke(service, args.limit))
    return asyncio.run(run_validate(service))


if __name__ == "__main__":
    raise SystemExit(main())
