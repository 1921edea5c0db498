#!/usr/bin/env python3
"""Chat dispatch pipeline CLI."""

import argparse
import logging
import sys
from config.settings import Settings
from errors import InvalidInboundMessage
from schemas.inbound import InboundMessage
from orchestrator import DispatchOrchestrator


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Chat dispatch pipeline - route a subscriber message to the right agent"
    )
    parser.add_argument(
        "--message",
        "-m",
        type=str,
        required=True,
        help="Inbound message text"
    )
    parser.add_argument(
        "--subscriber",
        "-s",
        type=str,
        default="cli-user",
        help="Subscriber id (default: cli-user)"
    )
    parser.add_argument(
        "--name",
        "-n",
        type=str,
        default=None,
        help="Subscriber display name"
    )
    parser.add_argument(
        "--storage",
        type=str,
        choices=["memory", "sqlite"],
        default="memory",
        help="State storage backend (default: memory)"
    )
    parser.add_argument(
        "--provider",
        type=str,
        choices=["openai", "anthropic"],
        default="openai",
        help="Completion provider (default: openai)"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    settings = Settings(
        llm_provider=args.provider,
        storage_backend=args.storage,
        verbose=args.verbose,
    )

    orchestrator = DispatchOrchestrator(settings=settings)

    try:
        result = orchestrator.process(InboundMessage(
            subscriber_id=args.subscriber,
            message_text=args.message,
            display_name=args.name,
        ))
    except InvalidInboundMessage as e:
        print(f"Invalid message: {e}", file=sys.stderr)
        sys.exit(2)
    finally:
        orchestrator.shutdown(wait=True)

    print("\n" + "="*60)
    print(f"STATUS: {result.status.value}")
    if result.category:
        print(f"CATEGORY: {result.category.value}")
    print(f"LANGUAGE: {result.language.value if result.language else '-'}")
    print(f"DURATION: {result.duration_ms}ms")
    for warning in result.warnings:
        print(f"WARNING: {warning}")
    print("="*60 + "\n")
    print(result.response_text)
    print("\n")


if __name__ == "__main__":
    main()
