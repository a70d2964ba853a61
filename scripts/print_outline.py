"""
Print the inferred section outline of an HTML file.

Usage::

    python scripts/print_outline.py page.html
    python scripts/print_outline.py page.html --json
"""

import argparse
import json
import sys
from pathlib import Path

from strata.core.document import DocumentError, HtmlDocument
from strata.hierarchy import HierarchyBuilder, HierarchyExtractor
from strata.hierarchy.tree import max_depth


def main() -> int:
    """Scan the file and print its outline.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    parser = argparse.ArgumentParser(description="Print the section outline of an HTML file.")
    parser.add_argument("path", type=Path, help="HTML file to scan")
    parser.add_argument("--json", action="store_true", help="Print the hierarchy-update message")
    args = parser.parse_args()

    try:
        document = HtmlDocument.from_path(args.path)
    except DocumentError as exc:
        print(f"ERROR: {exc}")
        if exc.details:
            print(f"       {exc.details}")
        return 1

    messages: list[dict] = []
    roots = HierarchyExtractor(document, messages.append).scan()

    if args.json:
        print(json.dumps(messages[-1], indent=2, ensure_ascii=False))
        return 0

    rows = HierarchyBuilder.flatten(roots)
    if not rows:
        print("No sections found.")
        return 0

    for row in rows:
        indent = "  " * (row["depth"] - 1)
        print(f"{indent}- {row['label']}  [{row['id']}]")
    print()
    print(f"{len(rows)} sections, {len(roots)} top-level, {max_depth(roots)} levels deep")
    return 0


if __name__ == "__main__":
    sys.exit(main())
