"""
CLI commands - entry points for querying the pipeline from a terminal.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment
3. Run the pipeline piece
4. Print results
5. Return exit code

Commands are thin wrappers: the work happens in the service, the
classifier and the store, which stay testable without a terminal.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from dotenv import load_dotenv


def _load_env() -> None:
    """Load environment variables from .env file."""
    load_dotenv()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_emergency(signal) -> None:
    print(f"\n!!! {signal.warning} !!!\n", file=sys.stderr)


def run_ask_cli(argv: Sequence[str] | None = None) -> int:
    """CLI entry point for answering one question."""
    from medical_rag_pipeline.observability import init_tracing, shutdown_tracing
    from medical_rag_pipeline.pipeline import MedicalRAGService

    parser = argparse.ArgumentParser(prog="medrag ask", description="Ask a health question")
    parser.add_argument("text", help="Question text")
    parser.add_argument("--patient-id", default=None, help="Patient identifier")
    parser.add_argument("--session-id", default=None, help="Session identifier")
    parser.add_argument("--json", action="store_true", help="Print the raw response envelope")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    _load_env()
    _configure_logging(args.verbose)
    init_tracing()

    try:
        service = MedicalRAGService(on_emergency=_print_emergency)
        reply = service.handle_request(
            {"text": args.text, "patientId": args.patient_id, "sessionId": args.session_id}
        )
    finally:
        shutdown_tracing()

    if args.json:
        print(json.dumps(reply.to_wire(), indent=2, ensure_ascii=False))
        return 0 if reply.success else 1

    print("=" * 60)
    print("MEDICAL ANSWER")
    print("=" * 60)

    body = reply.response
    if body.warnings:
        for warning in body.warnings:
            print(f"  [!] {warning}")
        print()

    print(body.answer)
    print(f"\nConfidence: {body.confidence:.1%}")

    if body.sources:
        print("\nSources:")
        for source in body.sources:
            print(f"  - {source.title} ({source.source}, reliability: {source.reliability})")

    if not reply.success:
        print(f"\n>>> ERROR {reply.code}: {reply.error} <<<")
        return 1
    return 0


def run_classify_cli(argv: Sequence[str] | None = None) -> int:
    """CLI entry point for urgency classification only (no model calls)."""
    from medical_rag_pipeline.triage import build_warnings, classify_urgency

    parser = argparse.ArgumentParser(prog="medrag classify", description="Classify query urgency")
    parser.add_argument("text", help="Query text")
    args = parser.parse_args(argv)

    tier = classify_urgency(args.text)
    print(f"Urgency: {tier.value}")
    for warning in build_warnings(args.text, tier):
        print(f"  [!] {warning}")
    return 0


def run_stats_cli(argv: Sequence[str] | None = None) -> int:
    """CLI entry point for knowledge base status."""
    from medical_rag_pipeline.core import MedicalRAGError
    from medical_rag_pipeline.pipeline import MedicalRAGService

    parser = argparse.ArgumentParser(prog="medrag stats", description="Show knowledge base status")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    _load_env()
    _configure_logging(args.verbose)

    service = MedicalRAGService()
    try:
        service.initialize()
    except MedicalRAGError as e:
        print(f"Initialization failed: {e.message}")

    print(json.dumps(service.status(), indent=2, ensure_ascii=False))
    return 0 if service.status()["healthy"] else 1


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        medrag ask "what is hypertension"   # Answer a question
        medrag classify "chest pain"        # Urgency tier only
        medrag stats                        # Knowledge base status
    """
    argv = list(sys.argv[1:] if argv is None else argv)

    parser = argparse.ArgumentParser(
        prog="medrag",
        description="Medical knowledge retrieval pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  ask         Answer a health question from the knowledge base
  classify    Classify the urgency of a question (no model calls)
  stats       Show knowledge base status

Examples:
  medrag ask "what is hypertension"
  medrag ask "dor no peito" --json
  USE_MOCK_EMBEDDINGS=true USE_MOCK_GENERATION=true medrag ask "flu symptoms"
        """,
    )
    parser.add_argument("command", choices=["ask", "classify", "stats"], help="Command to run")

    # Parse just the command; the rest belongs to the subcommand
    args = parser.parse_args(argv[:1])
    remaining = argv[1:]

    commands = {
        "ask": run_ask_cli,
        "classify": run_classify_cli,
        "stats": run_stats_cli,
    }

    try:
        return commands[args.command](remaining)
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
