"""
CryptoLens command line

    python -m cryptolens "What's the SOL price?"
    python -m cryptolens "bonk launches this week" --json
    python -m cryptolens --serve
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

from cryptolens.adapters.event_sink_adapter import LoggingEventSink, RecordingEventSink
from cryptolens.adapters.llm_adapter import LiteLLMAdapter
from cryptolens.aggregation.chains import ChainFactory
from cryptolens.config import get_settings
from cryptolens.domain.models import QueryResult
from cryptolens.infrastructure.errors import CryptoLensError
from cryptolens.infrastructure.logging import setup_logging
from cryptolens.orchestrator import QueryOrchestrator, create_orchestrator
from cryptolens.ports.interfaces import EventSink


def print_banner():
    """Print the program banner"""
    print("=" * 80)
    print("CryptoLens - crypto market query assistant")
    print("Type a question, or 'exit' to quit")
    print("=" * 80)


def build_orchestrator(events: EventSink) -> QueryOrchestrator:
    settings = get_settings()
    llm_port = LiteLLMAdapter(settings.llm) if settings.llm.enabled else None
    return create_orchestrator(
        chain_factory=ChainFactory(settings.providers),
        events=events,
        llm_port=llm_port,
    )


def print_result(result: QueryResult, as_json: bool):
    if as_json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str))
        return

    print(result.answer)
    print("-" * 60)
    print(
        f"{result.metadata.total_count} results from {', '.join(result.metadata.providers)} "
        f"({result.resolution_source.value} intent, {result.elapsed_ms}ms)"
    )


def print_trace(events: RecordingEventSink):
    print("\nEvents:")
    for name, fields in events.events:
        print(f"  {name} {json.dumps(fields, ensure_ascii=False, default=str)}")


def run_query(orchestrator: QueryOrchestrator, query: str, as_json: bool,
              trace: Optional[RecordingEventSink] = None) -> int:
    """
    Answer one query and print it

    Returns:
        int: process exit code (0 on success, 2 for a bad query, 1 otherwise)
    """
    try:
        result = asyncio.run(orchestrator.handle_query(query))
    except CryptoLensError as e:
        print(f"Error [{e.error_code.value}]: {e.message}", file=sys.stderr)
        return 2 if e.error_code.value == "invalid_input" else 1
    finally:
        if trace is not None:
            print_trace(trace)
            trace.events.clear()

    print_result(result, as_json)
    return 0


def run_interactive(orchestrator: QueryOrchestrator, as_json: bool,
                    trace: Optional[RecordingEventSink] = None):
    print_banner()
    while True:
        try:
            query = input("\n> ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nBye!")
            break

        if query.lower() in ("exit", "quit"):
            break
        if not query:
            continue
        run_query(orchestrator, query, as_json, trace)


def serve():
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "cryptolens.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


def main(argv=None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        prog="cryptolens",
        description="CryptoLens - answers questions about the crypto market",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cryptolens                                     # interactive mode
  python -m cryptolens "pump.fun tokens above $19k in the last hour"
  python -m cryptolens "Top DeFi protocols on Solana" --json
  python -m cryptolens "What's the SOL price?" --trace     # show pipeline events
  python -m cryptolens --serve                             # start the HTTP API
        """
    )
    parser.add_argument("query", nargs="?", help="question to answer")
    parser.add_argument("--json", action="store_true", help="print the full result as JSON")
    parser.add_argument("--trace", action="store_true", help="print the pipeline events after each answer")
    parser.add_argument("--serve", action="store_true", help="run the HTTP API with uvicorn")
    parser.add_argument("--log-level", default=None, help="log level (default: LOG_LEVEL or WARNING)")

    args = parser.parse_args(argv)

    if args.serve:
        serve()
        return 0

    settings = get_settings()
    setup_logging(level=args.log_level or ("INFO" if settings.DEBUG else "WARNING"),
                  json_format=settings.LOG_JSON)

    trace = RecordingEventSink() if args.trace else None
    orchestrator = build_orchestrator(trace if trace is not None else LoggingEventSink())

    if args.query:
        return run_query(orchestrator, args.query, args.json, trace)

    run_interactive(orchestrator, args.json, trace)
    return 0


if __name__ == "__main__":
    sys.exit(main())
