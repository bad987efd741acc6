"""Markdown rendering of size reports."""

from .diff import ChangeRow, Report

# Existing reports on a pull request are found by this prefix, so it must never change
SIZE_COMPARE_HEADING = "## 🚛 sizecompare report"

COLUMNS = ["File", "+/-", "Base", "Current", "+/- gzip", "Base gzip", "Current gzip"]


def format_size(size_bytes: int) -> str:
    """Format byte size in human-readable format.

    Args:
        size_bytes: Size in bytes, negative values keep their sign

    Returns:
        Human-readable size string (e.g., "1.50 MB")
    """
    sign = '-' if size_bytes < 0 else ''
    size: float = float(abs(size_bytes))
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            if unit == 'B':
                return f"{sign}{int(size)} {unit}"
            return f"{sign}{size:.2f} {unit}"
        size /= 1024.0
    return f"{sign}{size:.2f} PB"


def format_signed_size(size_bytes: int) -> str:
    """Format a byte delta with an explicit '+' for growth, e.g. "+20 B" or "-1.50 KB"."""
    if size_bytes > 0:
        return '+' + format_size(size_bytes)
    return format_size(size_bytes)


def signed_fixed_percent(value: float) -> str:
    """Format a percentage with two decimals and an explicit sign; exactly zero is '='."""
    if value == 0:
        return "="
    return f"{'+' if value > 0 else ''}{value:.2f}%"


def _change_cell(percentage: float, delta: int, added: bool) -> str:
    # A file that is new in head has no base to compare against; show it as a full addition
    text = signed_fixed_percent(100.0) if added else signed_fixed_percent(percentage)
    return f"{text} ({format_signed_size(delta)})"


def _escape(text: str) -> str:
    return text.replace('|', '\\|')


def format_row(row: ChangeRow) -> list[str]:
    """Convert a change row into the seven table cells."""
    base = row.base_or_zero
    head = row.head_or_zero
    return [
        _escape(row.label),
        _change_cell(row.size_percentage, row.size_delta, row.is_added),
        format_size(base.size),
        format_size(head.size),
        _change_cell(row.compressed_size_percentage, row.compressed_size_delta, row.is_added),
        format_size(base.compressed_size),
        format_size(head.compressed_size),
    ]


def format_table(rows: list[list[str]]) -> list[str]:
    """Lay out a Markdown table with every column padded to its widest cell.

    Args:
        rows: Header row followed by data rows, all of the same length

    Returns:
        Table lines without trailing newlines
    """
    col_widths = [max(3, max(len(row[i]) for row in rows)) for i in range(len(rows[0]))]

    def line(cells: list[str]) -> str:
        return "| " + " | ".join(f"{cell:<{col_widths[i]}}" for i, cell in enumerate(cells)) + " |"

    lines = [line(rows[0]), "| " + " | ".join("-" * width for width in col_widths) + " |"]
    for row in rows[1:]:
        lines.append(line(row))
    return lines


def comparison_link(repository_url: str, base_sha: str, head_sha: str) -> str:
    return f"[Compare {base_sha[:7]}...{head_sha[:7]}]({repository_url}/compare/{base_sha}...{head_sha})"


def render(report: Report, *, repository_url: str | None = None) -> str:
    """Render a report as Markdown.

    The first line is always SIZE_COMPARE_HEADING. A comparison link follows when
    repository_url is given and the report knows both commits. The output depends only on the
    report's numbers and names, so rendering the same report twice gives identical text.

    Args:
        report: Report to render
        repository_url: Web URL of the repository, e.g. https://github.com/owner/repo

    Returns:
        Report text without a trailing newline
    """
    lines = [SIZE_COMPARE_HEADING]
    if repository_url and report.base_sha and report.head_sha:
        lines.append("")
        lines.append(comparison_link(repository_url.rstrip('/'), report.base_sha, report.head_sha))
    lines.append("")
    lines.extend(format_table([COLUMNS] + [format_row(row) for row in report.rows]))
    return "\n".join(lines)
