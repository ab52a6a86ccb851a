from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Dict

from jinja2 import Environment, PackageLoader, select_autoescape

from ..engine.gate import ScanResult


def _env() -> Environment:
    return Environment(
        loader=PackageLoader("finval.reporting", "templates"),
        autoescape=select_autoescape(default=True, default_for_string=True),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def error_counts(result: ScanResult) -> Dict[str, int]:
    """Failing verdicts per error code, most frequent first."""
    counts = Counter(
        verdict.error_code.value
        for finding in result.findings
        for verdict in finding.verdicts.values()
        if not verdict.valid
    )
    return dict(counts.most_common())


def render_report(result: ScanResult) -> str:
    # Only field names, codes and messages reach the page; raw values never do.
    return _env().get_template("report.html.j2").render(result=result, counts=error_counts(result))


def write_report(result: ScanResult, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_report(result), encoding="utf-8")
