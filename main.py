"""
Entry point — converts one question to Cypher from the command line.

Runs the same pipeline as the HTTP gateway and the MCP server without
starting either.  Useful for checking the prompt against a local model.

Usage:
    python main.py "Show me all training plans"
    python main.py --execute "How many training sessions are there?"

For the HTTP API:     python -m cypher_bridge.gateway.app
For the MCP server:   python -m cypher_bridge.agents.cypher_tools.server
"""

import argparse
import asyncio
import json
import sys

from cypher_bridge.pipeline import CypherConverter, QueryExecutor, load_prompt_context
from cypher_bridge.shared.config import BaseServiceSettings
from cypher_bridge.shared.database import Neo4jHandler
from cypher_bridge.shared.exceptions import CypherBridgeError
from cypher_bridge.shared.llms import get_ollama_gateway
from cypher_bridge.shared.logging import setup_logging

EXAMPLES = [
    "Show me all training plans",
    "Find documents about safety",
    "How many training sessions are there?",
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert a natural-language question into read-only Cypher.",
        epilog="Examples:\n" + "\n".join(f'  python main.py "{q}"' for q in EXAMPLES),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("question", nargs="*", help="Question to convert")
    parser.add_argument(
        "--execute", action="store_true", help="Also run the query against Neo4j"
    )
    return parser


async def run(question: str, execute: bool, settings: BaseServiceSettings) -> int:
    gateway = get_ollama_gateway(settings)
    try:
        converter = CypherConverter(gateway, load_prompt_context(settings.system_prompt_path))
        result = await converter.convert(question)
    finally:
        await gateway.close()

    if not result.success:
        print(f"Failed to generate Cypher query: {result.error}", file=sys.stderr)
        return 1

    print("Generated Cypher Query:")
    print(f"   {result.query}")
    print(f"   ({result.duration_ms}ms)")

    if not execute:
        return 0

    async with Neo4jHandler.from_settings(settings) as handler:
        try:
            execution = await QueryExecutor(handler).execute(result.query)
        except CypherBridgeError as exc:
            print(f"Query failed: {exc}", file=sys.stderr)
            return 1

    print(f"\n{execution.row_count} records ({execution.execution_time_ms:.0f}ms):")
    print(json.dumps(execution.rows, indent=2, default=str))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    question = " ".join(args.question).strip()
    if not question:
        parser.print_help()
        return 1

    settings = BaseServiceSettings()
    setup_logging("cypher_bridge", level=settings.log_level)
    try:
        return asyncio.run(run(question, args.execute, settings))
    except CypherBridgeError as exc:
        print(str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
