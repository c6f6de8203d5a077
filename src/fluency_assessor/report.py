from __future__ import annotations

import html
from pathlib import Path
from typing import Sequence, Union

from .schemas import CorrectionResult, DetectedError, PronunciationAnalysis


Result = Union[CorrectionResult, PronunciationAnalysis]

_STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, Segoe UI, Roboto, Helvetica, Arial; margin: 24px; }
    .mono { font-family: ui-monospace, SFMono-Regular, Menlo, Monaco, Consolas, "Liberation Mono", "Courier New", monospace; }
    table { border-collapse: collapse; width: 100%; }
    th, td { border: 1px solid #ddd; padding: 8px; vertical-align: top; }
    th { background: #f7f7f7; text-align: left; }
    mark.major { background: #fecaca; }
    mark.moderate { background: #fde68a; }
    mark.minor { background: #bbf7d0; }
    .fix { color: #0f766e; font-weight: 600; }
"""


def write_json(result: Result, path: str | Path) -> None:
    Path(path).write_text(result.model_dump_json(indent=2), encoding="utf-8")


def highlight_errors(text: str, errors: Sequence[DetectedError]) -> str:
    """
    HTML-escape `text` and wrap each error span in a <mark>. Spans are
    spliced from the last start backwards, as in the corrector itself.
    """
    pieces: list[str] = []
    cursor = len(text)
    for e in sorted(errors, key=lambda e: e.position.start, reverse=True):
        start, end = e.position.start, e.position.end
        if end > cursor:
            continue
        pieces.append(html.escape(text[end:cursor]))
        pieces.append(
            f"<mark class='{e.severity.value}' title='{html.escape(e.corrected, quote=True)}'>"
            f"{html.escape(text[start:end])}</mark>"
        )
        cursor = start
    pieces.append(html.escape(text[:cursor]))
    return "".join(reversed(pieces))


def _items(values: Sequence[str]) -> str:
    return "".join(f"<li>{html.escape(v)}</li>" for v in values) or "<li>(none)</li>"


def _page(title: str, body: str) -> str:
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <title>{html.escape(title)}</title>
  <style>{_STYLE}</style>
</head>
<body>
  <h1>{html.escape(title)}</h1>
{body}
</body>
</html>
"""


def _correction_body(result: CorrectionResult) -> str:
    rows = []
    for e in result.errors:
        rows.append(
            "<tr>"
            f"<td>{e.position.start}-{e.position.end}</td>"
            f"<td>{html.escape(e.type.value)}</td>"
            f"<td>{html.escape(e.severity.value)}</td>"
            f"<td class='mono'>{html.escape(e.original)}</td>"
            f"<td class='mono fix'>{html.escape(e.corrected)}</td>"
            f"<td>{html.escape(e.explanation)}</td>"
            f"<td>{html.escape(e.source)}</td>"
            "</tr>"
        )
    error_body = "".join(rows) or "<tr><td colspan='7'>(none)</td></tr>"

    return f"""  <p><b>Original:</b> {highlight_errors(result.original, result.errors)}</p>
  <p><b>Corrected:</b> {html.escape(result.corrected)}</p>
  <p>{html.escape(result.explanation)}</p>

  <h2>Scores</h2>
  <table>
    <thead><tr><th>Overall</th><th>Grammar</th><th>Vocabulary</th><th>Style</th></tr></thead>
    <tbody><tr><td>{result.overall_score}</td><td>{result.grammar_score}</td><td>{result.vocabulary_score}</td><td>{result.style_score}</td></tr></tbody>
  </table>

  <h2>Errors</h2>
  <table>
    <thead>
      <tr><th>Span</th><th>Type</th><th>Severity</th><th>Original</th><th>Corrected</th><th>Explanation</th><th>Source</th></tr>
    </thead>
    <tbody>
      {error_body}
    </tbody>
  </table>

  <h2>Suggestions</h2>
  <ul>{_items(result.suggestions)}</ul>
  <h2>Strengths</h2>
  <ul>{_items(result.strengths)}</ul>
  <h2>Improvements</h2>
  <ul>{_items(result.improvements)}</ul>"""


def _confusions(counts: dict[str, int]) -> str:
    if not counts:
        return "(none)"
    return ", ".join(f"{k} x{n}" for k, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))


def _pronunciation_body(result: PronunciationAnalysis) -> str:
    metrics = [
        ("Overall", result.overall_score),
        ("Similarity", result.similarity),
        ("Accuracy", result.accuracy),
        ("Fluency", result.fluency),
        ("Clarity", result.clarity),
        ("Completeness", result.completeness),
        ("Pacing", result.pacing),
        ("Stress pattern", result.stress_pattern),
    ]
    metric_rows = "".join(f"<tr><td>{name}</td><td>{value}</td></tr>" for name, value in metrics)

    sound_rows = []
    for s in result.sound_accuracies:
        sound_rows.append(
            "<tr>"
            f"<td>{s.position}</td>"
            f"<td>{html.escape(s.phoneme)}</td>"
            f"<td class='mono'>{html.escape(s.target_sound)}</td>"
            f"<td class='mono'>{html.escape(s.actual_sound)}</td>"
            f"<td>{s.accuracy:.2f}</td>"
            f"<td>{html.escape(s.feedback)}</td>"
            "</tr>"
        )
    sound_body = "".join(sound_rows) or "<tr><td colspan='6'>(none)</td></tr>"

    return f"""  <p><b>Mode:</b> {html.escape(result.mode)}</p>
  <ul>{_items(result.feedback)}</ul>

  <h2>Scores</h2>
  <table>
    <thead><tr><th>Metric</th><th>Score</th></tr></thead>
    <tbody>{metric_rows}</tbody>
  </table>

  <h2>Difficult sounds</h2>
  <table>
    <thead>
      <tr><th>Word</th><th>Sound</th><th>Target</th><th>Spoken</th><th>Accuracy</th><th>Feedback</th></tr>
    </thead>
    <tbody>
      {sound_body}
    </tbody>
  </table>

  <p><b>Missed words:</b> {html.escape(', '.join(result.missed_words)) or '(none)'}</p>
  <p><b>Sound confusions:</b> {html.escape(_confusions(result.confusions))}</p>

  <h2>Recommendations</h2>
  <ul>{_items(result.recommendations)}</ul>
  <h2>Strengths</h2>
  <ul>{_items(result.strengths)}</ul>
  <h2>Improvements</h2>
  <ul>{_items(result.improvements)}</ul>"""


def write_html(result: Result, path: str | Path) -> None:
    if isinstance(result, CorrectionResult):
        doc = _page("Writing Correction Report", _correction_body(result))
    else:
        doc = _page("Pronunciation Report", _pronunciation_body(result))
    Path(path).write_text(doc, encoding="utf-8")
