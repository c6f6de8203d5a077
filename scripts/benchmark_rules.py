from __future__ import annotations

import argparse
from pathlib import Path
from time import perf_counter

from fluency_assessor.aggregate import correct_text
from fluency_assessor.tables import load_rule_table


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("text_file", help="One learner sentence per line.")
    ap.add_argument("--rules", default=None, help="Rule table to benchmark (default: bundled).")
    args = ap.parse_args()

    lines = [l.strip() for l in Path(args.text_file).read_text(encoding="utf-8").splitlines() if l.strip()]
    if not lines:
        print("No sentences found.")
        return 1

    rules = load_rule_table(args.rules)
    t0 = perf_counter()
    n_errors = 0
    for line in lines:
        n_errors += len(correct_text(line, rules=rules).errors)
    dt = perf_counter() - t0
    print(f"Corrected {len(lines)} sentences ({n_errors} errors) with {len(rules)} rules in {dt:.2f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
