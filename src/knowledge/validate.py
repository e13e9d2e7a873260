"""Command line report for a profile dataset.

Usage:
    persona-chat-validate-kb [--path PATH] [--min-entries N]

Exits with status 0 when the dataset is valid and 1 otherwise.
"""

import argparse
import sys
from collections import Counter
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from src.knowledge.base import (
    DEFAULT_KNOWLEDGE_BASE_PATH,
    DEFAULT_MIN_ENTRIES,
    KnowledgeBaseError,
    parse_knowledge_data,
    read_knowledge_file,
    validate_knowledge_data,
)


def report(path: Path, min_entries: int, out: TextIO | None = None) -> int:
    """Validate the dataset at ``path`` and print a summary to ``out`` (stdout by default).

    Returns:
        Process exit code.
    """
    out = out or sys.stdout
    print(f"Validating {path.name}...\n", file=out)

    try:
        data = read_knowledge_file(path)
    except KnowledgeBaseError as e:
        print(f"FAILED: {e}", file=out)
        return 1

    errors = validate_knowledge_data(data, min_entries=min_entries)
    if errors:
        print("FAILED: profile validation failed", file=out)
        print(f"Found {len(errors)} error(s):\n", file=out)
        for index, error in enumerate(errors, start=1):
            print(f"  {index}. {error}", file=out)
        return 1

    knowledge_base = parse_knowledge_data(data, min_entries=min_entries)
    print("PASSED: profile validation passed", file=out)
    print(f"Found {len(knowledge_base.entries)} valid entries", file=out)
    print(f"Version: {knowledge_base.version}", file=out)
    print(f"Last updated: {knowledge_base.last_updated}", file=out)

    topics = Counter(entry.topic for entry in knowledge_base.entries)
    print("\nEntries by topic:", file=out)
    for topic, count in sorted(topics.items()):
        print(f"  - {topic}: {count}", file=out)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate a persona profile dataset.")
    parser.add_argument("--path", type=Path, default=DEFAULT_KNOWLEDGE_BASE_PATH)
    parser.add_argument("--min-entries", type=int, default=DEFAULT_MIN_ENTRIES)
    args = parser.parse_args(argv)
    return report(args.path, args.min_entries)


if __name__ == "__main__":
    sys.exit(main())
