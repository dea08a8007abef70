"""
Analysis Engine

Classifies a parsed document and dispatches it to the evaluator for its
kind. Pure apart from logging: no I/O beyond analyze_file's single read,
no network, nothing cached between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from copilot.classifier import classify
from copilot.config_rules import analyze_config
from copilot.document import AnalysisResult, Document, DocumentKind
from copilot.loader import load_document
from copilot.policy_rules import analyze_policy
from copilot.transaction_rules import analyze_transaction

logger = logging.getLogger(__name__)

EVALUATORS: dict[DocumentKind, Callable[[Document], AnalysisResult]] = {
    DocumentKind.TRANSACTION: analyze_transaction,
    DocumentKind.POLICY: analyze_policy,
    DocumentKind.CONFIG: analyze_config,
}


@dataclass
class AnalysisReport:
    kind: DocumentKind
    result: AnalysisResult = field(default_factory=AnalysisResult)
    source: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.result.passed

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "kind": self.kind.value,
            "passed": self.passed,
            **self.result.to_dict(),
        }


def analyze(data: Any) -> AnalysisReport:
    doc = Document(data)
    kind = classify(doc)
    result = EVALUATORS[kind](doc)
    logger.debug("Analyzed %s document: %d issue(s)", kind.value, len(result.issues))
    return AnalysisReport(kind=kind, result=result)


def analyze_file(path: str | Path) -> AnalysisReport:
    """Load, classify, and evaluate the document at path."""
    report = analyze(load_document(path))
    report.source = str(path)
    return report
