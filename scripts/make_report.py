from __future__ import annotations

import argparse
from pathlib import Path

from fluency_assessor.cli import correct


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("text_file")
    ap.add_argument("--external-file", default=None)
    ap.add_argument("--out-dir", default="outputs")
    args = ap.parse_args()

    text = Path(args.text_file).read_text(encoding="utf-8").strip()
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    stem = Path(args.text_file).stem
    correct(
        text=text,
        external_file=args.external_file,
        rules_file=None,
        config=None,
        out_json=str(out_dir / f"{stem}.json"),
        out_html=str(out_dir / f"{stem}.html"),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
