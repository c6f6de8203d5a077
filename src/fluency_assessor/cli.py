from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from .aggregate import correct_text
from .config import load_config
from .external import coerce_payload
from .report import write_html, write_json
from .score import WEIGHTINGS, analyze_pronunciation
from .schemas import Utterance
from .tables import default_rules, default_sounds, default_substitutions, load_rule_table


app = typer.Typer(
    add_completion=False,
    help="Pronunciation scoring + rule-based writing correction (offline).",
    pretty_exceptions_show_locals=False,
)


def _configure_warnings() -> None:
    """
    Hide the per-rule and external-correction diagnostics
    (set `FLUENCY_ASSESS_SHOW_WARNINGS=1` to keep them).
    """
    import os
    import warnings

    from .errors import ExternalCorrectionWarning, RuleSkippedWarning

    if os.environ.get("FLUENCY_ASSESS_SHOW_WARNINGS", "").strip().lower() in {"1", "true", "yes"}:
        return

    warnings.filterwarnings("ignore", category=RuleSkippedWarning)
    warnings.filterwarnings("ignore", category=ExternalCorrectionWarning)


def _ensure_parent(path: str | Path | None) -> None:
    if not path:
        return
    p = Path(path)
    if p.parent and not p.parent.exists():
        p.parent.mkdir(parents=True, exist_ok=True)


def _write_outputs(result, out_json: Optional[str], out_html: Optional[str]) -> None:
    if out_json:
        _ensure_parent(out_json)
        write_json(result, out_json)
        typer.echo(f"Wrote {out_json}")
    if out_html:
        _ensure_parent(out_html)
        write_html(result, out_html)
        typer.echo(f"Wrote {out_html}")
    if not out_json and not out_html:
        typer.echo(result.model_dump_json(indent=2))


@app.command()
def doctor() -> None:
    """
    Print a quick environment diagnostic and check the bundled tables load.
    """
    import platform
    import sys

    import pydantic
    import yaml

    typer.echo(f"python: {sys.version.split()[0]}")
    typer.echo(f"platform: {platform.platform()}")
    typer.echo(f"pydantic: {pydantic.VERSION}")
    typer.echo(f"typer: {getattr(typer, '__version__', '?')}")
    typer.echo(f"pyyaml: {getattr(yaml, '__version__', '?')}")

    typer.echo(f"rules: {len(default_rules())}")
    typer.echo(f"substitutions: {sum(len(v) for v in default_substitutions().values())}")
    typer.echo(f"difficult sounds: {len(default_sounds())}")


@app.command()
def pronounce(
    target: str = typer.Argument(..., help="Text the learner was asked to say."),
    spoken: str = typer.Argument(..., help="Transcript of what was said."),
    mode: str = typer.Option("general", "--mode", help="general|focused"),
    config: Optional[str] = typer.Option(None, "--config", help="YAML/JSON scoring overrides."),
    out_json: Optional[str] = typer.Option(None, "--out-json", help="Write JSON report."),
    out_html: Optional[str] = typer.Option(None, "--out-html", help="Write HTML report."),
) -> None:
    _configure_warnings()
    if mode not in WEIGHTINGS:
        raise typer.BadParameter(f"--mode must be one of: {', '.join(WEIGHTINGS)}")

    result = analyze_pronunciation(target, spoken, mode, config=load_config(config))  # type: ignore[arg-type]
    _write_outputs(result, out_json, out_html)


@app.command()
def correct(
    text: str = typer.Argument(..., help="Learner text to correct."),
    external_file: Optional[str] = typer.Option(
        None, "--external-file", help="External correction: JSON payload or 'Corrected:/Reply:' text."
    ),
    rules_file: Optional[str] = typer.Option(None, "--rules", help="YAML/JSON rule table to use instead of the default."),
    config: Optional[str] = typer.Option(None, "--config", help="YAML/JSON scoring overrides."),
    out_json: Optional[str] = typer.Option(None, "--out-json", help="Write JSON report."),
    out_html: Optional[str] = typer.Option(None, "--out-html", help="Write HTML report."),
) -> None:
    _configure_warnings()
    external = None
    if external_file:
        external = coerce_payload(Path(external_file).read_text(encoding="utf-8"))

    rules = load_rule_table(rules_file) if rules_file else None
    result = correct_text(text, external, rules=rules, config=load_config(config))
    _write_outputs(result, out_json, out_html)


@app.command()
def rules(
    rules_file: Optional[str] = typer.Option(None, "--rules", help="YAML/JSON rule table (default: bundled)."),
) -> None:
    """
    List the correction rules in the order they are applied.
    """
    _configure_warnings()
    table = load_rule_table(rules_file) if rules_file else default_rules()
    for r in table:
        typer.echo(f"{r.rule_id}\t{r.type.value}\t{r.severity.value}\t{r.rule}")


@app.command()
def batch(
    csv_path: str = typer.Argument(..., help="CSV with columns id,text (correction) or id,target,spoken (pronunciation)."),
    out_dir: str = typer.Option("outputs", "--out-dir", help="Output directory."),
    mode: str = typer.Option("general", "--mode", help="general|focused (pronunciation rows)."),
    config: Optional[str] = typer.Option(None, "--config", help="YAML/JSON scoring overrides."),
) -> None:
    _configure_warnings()
    import csv

    out_p = Path(out_dir)
    out_p.mkdir(parents=True, exist_ok=True)

    with open(csv_path, "r", encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))

    for i, row in enumerate(rows, start=1):
        stem = (row.get("id") or "").strip() or f"row{i}"
        out_json = str(out_p / f"{stem}.json")
        out_html = str(out_p / f"{stem}.html")
        if (row.get("target") or "").strip():
            u = Utterance(target=row["target"], actual=row.get("spoken") or "")
            pronounce(
                target=u.target,
                spoken=u.actual,
                mode=mode,
                config=config,
                out_json=out_json,
                out_html=out_html,
            )
        elif (row.get("text") or "").strip():
            correct(
                text=row["text"],
                external_file=None,
                rules_file=None,
                config=config,
                out_json=out_json,
                out_html=out_html,
            )
        else:
            typer.echo(f"Skipping {stem}: needs a 'text' or 'target' value", err=True)
