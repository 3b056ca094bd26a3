"""Map a StatusRecord onto the ordered rows of the dashboard.

build_rows() is pure: the same record always yields the same sequence of
RowSpecs, so the registry can diff frames by key.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum

from prwatch_core.models import CheckResult, FileChange, StatusRecord


class RowKind(str, Enum):
    HEADER = "header"
    SECTION = "section"
    LABELED = "labeled"
    CHECK = "check"
    PLAIN = "plain"


@dataclass(frozen=True)
class RowSpec:
    key: str
    kind: RowKind = RowKind.LABELED
    prefix: str = ""
    message: str = ""
    indent: int = 0
    prefix_width: int | None = None
    spinning: bool = False
    style: str = ""


_LABEL_STYLES = {
    " OK ": "green",
    "Pass": "white",
    "Fail": "red",
    "Skip": "yellow",
}


def label_style(label: str) -> str:
    """Colour for a check's short label; unknown labels render plain."""
    return _LABEL_STYLES.get(label, "")


def file_column_width(files: list[FileChange]) -> int:
    """Width of the path column: the length of the longest path (0 if none)."""
    return max((len(f.path) for f in files), default=0)


def check_keys(checks: list[CheckResult]) -> list[str]:
    """Row keys for ``checks``, in order.

    Keys live under ``checks/`` so they never clash with file or detail rows.
    A name seen again (the same job run for two events, say) gets ``#2``,
    ``#3`` ... by order of appearance.
    """
    seen: Counter[str] = Counter()
    keys: list[str] = []
    for check in checks:
        key = f"checks/{check.name}"
        while key in keys:
            seen[check.name] += 1
            key = f"checks/{check.name}#{seen[check.name] + 1}"
        keys.append(key)
    return keys


def _section(key: str, title: str) -> RowSpec:
    return RowSpec(key=key, kind=RowKind.SECTION, prefix=title)


def _labeled(key: str, message: str, prefix: str | None = None) -> RowSpec:
    return RowSpec(key=key, kind=RowKind.LABELED, prefix=key if prefix is None else prefix, message=message)


def build_rows(record: StatusRecord) -> list[RowSpec]:
    """Build the dashboard rows for ``record`` in display order."""
    rows = [
        RowSpec(key="header", kind=RowKind.HEADER, prefix=f"#{record.number} - {record.title}"),
        RowSpec(key="url", kind=RowKind.PLAIN, prefix=">", message=record.url, indent=4),
        _section("body", "Body"),
        RowSpec(key="_body", kind=RowKind.PLAIN, message=record.body),
    ]

    if record.files:
        width = file_column_width(record.files)
        rows.append(_section("files", "Files"))
        rows.extend(
            RowSpec(
                key=f"files/{f.path}",
                kind=RowKind.LABELED,
                prefix=f.path,
                message=f"{f.additions}+{f.deletions}-",
                indent=2,
                prefix_width=width,
            )
            for f in record.files
        )

    rows.extend(
        [
            _section("details", "Details"),
            _labeled("state", record.state),
            _labeled("author", record.author),
            _labeled("createdAt", record.created_at),
            _labeled("updatedAt", record.updated_at),
            _labeled("sha", record.sha),
            # "url" is already taken by the link under the header.
            _labeled("details.url", record.url, prefix="url"),
        ]
    )

    if record.checks:
        rows.append(_section("checks", "Checks"))
        for check, key in zip(record.checks, check_keys(record.checks)):
            label = check.short_label
            rows.append(
                RowSpec(
                    key=key,
                    kind=RowKind.CHECK,
                    prefix=check.name,
                    message=f"[{label}]",
                    spinning=not check.is_terminal,
                    style=label_style(label),
                )
            )

    return rows
