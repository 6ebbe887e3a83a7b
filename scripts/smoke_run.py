#!/usr/bin/env python3
"""
Smoke test for shindancore - runs real submissions against ShindanMaker.

Not part of the unit test suite: it needs network access and depends on the live
service markup.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shindancore import ShindanClient, ShindanError  # noqa: E402

# (domain, shindan id, expected title)
SHINDANS = [
    ("en", "1222992", "Fantasy Stats"),
    ("en", "1218842", None),
    ("jp", "1252750", None),
]


async def run_smoke_test(name: str) -> dict:
    """Submit ``name`` to every known shindan and report failures."""
    failures = []
    for domain, quiz_id, expected_title in SHINDANS:
        async with ShindanClient(domain) as client:
            try:
                result = await client.get_text_result(quiz_id, name)
            except ShindanError as e:
                failures.append(f"{domain}/{quiz_id}: {type(e).__name__}: {e}")
                continue

        if expected_title is not None and result.title != expected_title:
            failures.append(f"{domain}/{quiz_id}: expected title {expected_title!r}, got {result.title!r}")
        elif not result.content:
            failures.append(f"{domain}/{quiz_id}: empty result")
        else:
            print(f"  {domain}/{quiz_id} {result.title!r}: {len(result.content)} segments")

    status = "FAILED" if failures else "PASSED"
    for failure in failures:
        print(f"  ❌ {failure}")
    print(f"\n{'✅' if not failures else '❌'} {status}: {len(SHINDANS) - len(failures)}/{len(SHINDANS)} shindans")
    return {"status": status, "failures": failures}


def main():
    parser = argparse.ArgumentParser(description="shindancore smoke test")
    parser.add_argument("--name", default="test_user", help="Input value to submit")
    args = parser.parse_args()

    result = asyncio.run(run_smoke_test(args.name))
    sys.exit(0 if result["status"] == "PASSED" else 1)


if __name__ == "__main__":
    main()
