"""
Terminal report for a `check` run.
"""

from __future__ import annotations

import json
import sys
from typing import Iterator, Optional, TextIO

from copilot.document import DocumentKind
from copilot.engine import AnalysisReport
from copilot.explain import Explainer

# ---------------------------------------------------------------------------
# Terminal colors (ANSI)
# ---------------------------------------------------------------------------

class C:
    RESET  = "\033[0m"
    RED    = "\033[31m"
    GREEN  = "\033[32m"
    YELLOW = "\033[33m"
    BLUE   = "\033[34m"
    CYAN   = "\033[36m"


class Palette:
    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def paint(self, text: str, color: str) -> str:
        return f"{color}{text}{C.RESET}" if self.enabled else text

    def error(self, text: str) -> str:
        return self.paint(text, C.RED)

    def success(self, text: str) -> str:
        return self.paint(text, C.GREEN)

    def warning(self, text: str) -> str:
        return self.paint(text, C.YELLOW)

    def info(self, text: str) -> str:
        return self.paint(text, C.BLUE)

    def code(self, text: str) -> str:
        return self.paint(text, C.CYAN)


KIND_HEADERS = {
    DocumentKind.TRANSACTION: "📝 Detected Turnkey transaction signing request",
    DocumentKind.POLICY: "📋 Detected Turnkey policy file",
    DocumentKind.CONFIG: "⚙️ Detected Turnkey configuration file",
}


def iter_lines(
    report: AnalysisReport,
    explainer: Optional[Explainer] = None,
    palette: Optional[Palette] = None,
) -> Iterator[str]:
    """
    Yield the report line by line.

    With an explainer, each issue gets a detailed explanation; these are
    requested one at a time, in issue order, only once the issue itself has
    been yielded.
    """
    p = palette or Palette()
    yield p.success(KIND_HEADERS[report.kind])
    result = report.result

    if result.passed:
        yield p.success("✅ No issues found!")
        if report.kind is DocumentKind.TRANSACTION and result.suggestions:
            yield p.info("\n📋 Next steps:")
            yield result.suggestions[0]
        return

    yield p.warning(f"\n🚨 Found {len(result.issues)} potential issues:")
    for i, (issue, suggestion) in enumerate(result.pairs(), start=1):
        yield p.warning(f"\n[Issue {i}]:")
        yield issue
        if suggestion:
            yield p.success("\n[Suggested Fix]:")
            yield suggestion
        if explainer is not None:
            yield p.info("\n[Detailed Explanation]:")
            yield explainer.explain(issue, suggestion)


def render(
    report: AnalysisReport,
    explainer: Optional[Explainer] = None,
    palette: Optional[Palette] = None,
) -> str:
    """Render a report as terminal text."""
    return "\n".join(iter_lines(report, explainer, palette))


def render_json(report: AnalysisReport) -> str:
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)


def print_report(
    report: AnalysisReport,
    explainer: Optional[Explainer] = None,
    palette: Optional[Palette] = None,
    stream: TextIO | None = None,
) -> None:
    """Print the report as it is produced, so each issue shows before its explanation is fetched."""
    out = stream or sys.stdout
    for line in iter_lines(report, explainer, palette):
        print(line, file=out, flush=True)
