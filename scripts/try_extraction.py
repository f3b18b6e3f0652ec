#!/usr/bin/env python3
"""
Check that the configured LLM provider actually returns valid intents.
Run from project root: python scripts/try_extraction.py ["your own text" ...]
Uses LLM_PROVIDER / GEMINI_API_KEY / OPENAI_* from the environment or .env.
Exits with 0 on pass, 1 on failure.
"""
import asyncio
import json
import logging
import sys

from synapse.config import load_config
from synapse.intent import IntentExtractionPipeline, PipelineError
from synapse.llm import build_provider

# Show INFO logs from the pipeline and provider
logging.basicConfig(
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    level=logging.INFO,
    datefmt="%H:%M:%S",
)

# (message, expected intent or None to accept any)
DEFAULT_CASES = [
    ("hello", "none"),
    ("Meeting with the design team tomorrow at 3pm", "create_event"),
    ("Remember to renew my passport", "create_task"),
]


async def run_case(pipeline: IntentExtractionPipeline, message: str, expected: str | None) -> bool:
    """Run one extraction; return True if it passed."""
    print(f"Message: {message!r}")
    try:
        intent = await pipeline.extract(message, {"source": "try_extraction"})
    except PipelineError as e:
        print(f"  FAILED: {e}")
        if e.raw_output:
            print(f"  Raw output: {e.raw_output}")
        return False
    print("  Result:", json.dumps(intent.to_dict(), indent=2))
    if expected and intent.intent != expected:
        print(f"  FAILED: expected intent {expected!r}, got {intent.intent!r}")
        return False
    print("  PASSED\n")
    return True


async def main(argv: list[str]) -> int:
    config = load_config()
    cases = [(text, None) for text in argv] or DEFAULT_CASES

    async with build_provider(config) as provider:
        pipeline = IntentExtractionPipeline(provider, timeout=config.llm_timeout)
        print(f"Testing intent extraction with provider={provider.name}...\n")
        results = [await run_case(pipeline, message, expected) for message, expected in cases]

    passed = sum(results)
    print(f"Overall: {'PASSED' if all(results) else 'FAILED'} ({passed}/{len(results)})")
    return 0 if all(results) else 1


if __name__ == "__main__":
    exit_code = asyncio.run(main(sys.argv[1:]))
    sys.exit(exit_code)
