"""
Document Model

Read-only wrapper over a parsed JSON document with typed, fallible field
accessors, plus the AnalysisResult that every evaluator produces.

Each accessor reports one of three states for a field: absent, present with
the wrong type, or present and valid. Rules decide what each state means;
nothing is coerced silently.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Domain types
# ---------------------------------------------------------------------------

class DocumentKind(str, Enum):
    TRANSACTION = "transaction"
    POLICY = "policy"
    CONFIG = "config"


class FieldState(str, Enum):
    ABSENT = "absent"
    WRONG_TYPE = "wrong_type"
    PRESENT = "present"


def _truthy(raw: Any) -> bool:
    # Empty containers still count as set; only scalars can be blank.
    if isinstance(raw, (list, dict)):
        return True
    return bool(raw)


@dataclass(frozen=True)
class FieldValue:
    state: FieldState
    value: Any = None   # typed value, only when PRESENT
    raw: Any = None     # whatever the document holds, when not ABSENT

    @property
    def present(self) -> bool:
        return self.state is FieldState.PRESENT

    @property
    def is_set(self) -> bool:
        """True when the key exists and holds a non-blank value of any type."""
        return self.state is not FieldState.ABSENT and _truthy(self.raw)

    @property
    def missing(self) -> bool:
        return not self.is_set


_ABSENT = FieldValue(FieldState.ABSENT)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

class Document(Mapping[str, Any]):
    """
    Immutable view of a parsed JSON object.

    A top-level value that is not an object is treated as an empty document,
    so classification and evaluation never have to special-case it.
    """

    def __init__(self, data: Any = None):
        if isinstance(data, Document):
            data = data._data
        self._data: Mapping[str, Any] = MappingProxyType(
            dict(data) if isinstance(data, Mapping) else {}
        )

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Document({dict(self._data)!r})"

    def has(self, *keys: str) -> bool:
        """True when every key is present, whatever its value."""
        return all(k in self._data for k in keys)

    def _typed(self, key: str, check) -> FieldValue:
        if key not in self._data:
            return _ABSENT
        raw = self._data[key]
        if raw is not None and check(raw):
            return FieldValue(FieldState.PRESENT, raw, raw)
        return FieldValue(FieldState.WRONG_TYPE, None, raw)

    def get_str(self, key: str) -> FieldValue:
        return self._typed(key, lambda v: isinstance(v, str))

    def get_number(self, key: str) -> FieldValue:
        # bool is an int subclass; JSON true/false is not a number here
        return self._typed(
            key, lambda v: isinstance(v, (int, float)) and not isinstance(v, bool)
        )

    def get_list(self, key: str) -> FieldValue:
        return self._typed(key, lambda v: isinstance(v, list))

    def get_mapping(self, key: str) -> FieldValue:
        fv = self._typed(key, lambda v: isinstance(v, Mapping))
        if fv.present:
            return FieldValue(FieldState.PRESENT, Document(fv.raw), fv.raw)
        return fv

    def child(self, key: str) -> "Document":
        """Nested object under key, or an empty document."""
        fv = self.get_mapping(key)
        return fv.value if fv.present else Document()

    def children(self, key: str) -> list["Document"]:
        """Entries of the list under key, each wrapped as a Document."""
        fv = self.get_list(key)
        if not fv.present:
            return []
        return [Document(entry) for entry in fv.value]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

def json_block(*lines: str) -> str:
    """Wrap lines of JSON in a fenced block for a suggestion."""
    return "```json\n" + "\n".join(lines) + "\n```"


@dataclass
class AnalysisResult:
    """
    Ordered issues and suggestions.

    suggestions[i] belongs to issues[i]. The lists may differ in length:
    a clean document can still carry an informational suggestion.
    """
    issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.issues

    def add(self, issue: str, suggestion: str) -> None:
        self.issues.append(issue)
        self.suggestions.append(suggestion)

    def note(self, suggestion: str) -> None:
        """Append an informational suggestion with no matching issue."""
        self.suggestions.append(suggestion)

    def pairs(self) -> Iterator[tuple[str, Optional[str]]]:
        for i, issue in enumerate(self.issues):
            yield issue, (self.suggestions[i] if i < len(self.suggestions) else None)

    def to_dict(self) -> dict[str, list[str]]:
        return {"issues": list(self.issues), "suggestions": list(self.suggestions)}

    def summary(self) -> str:
        if self.passed:
            return "No issues found"
        lines = [f"Issues: {len(self.issues)}"]
        for issue in self.issues:
            lines.append(f"  - {issue}")
        return "\n".join(lines)
