"""Render the analyzed usage map. Read-only: nothing here mutates an entry."""

from __future__ import annotations

import sys
from typing import Dict, List, Mapping, Optional, TextIO

import markdown as md

from .models import ActionUsage

REPORT_FORMATS = ("text", "markdown", "html")


def summarize(usage: Mapping[str, ActionUsage]) -> Dict[str, int]:
    return {
        "actions": len(usage),
        "npm": sum(1 for info in usage.values() if info.uses_npm),
        "infected": sum(1 for info in usage.values() if info.is_infected),
    }


def render_text(usage: Mapping[str, ActionUsage]) -> str:
    lines: List[str] = ["", "Actions and the repositories they are used in:"]
    for reference, info in usage.items():
        lines.append(f"{reference}:")
        lines.append(f"  Uses npm: {info.uses_npm}")
        if info.is_infected:
            lines.append(f"  ⚠️  INFECTED: {info.is_infected}")
            lines.append(f"  Infected packages: {info.infected_packages}")
        else:
            lines.append(f"  Infected: {info.is_infected}")
        lines.append("  Used in repositories:")
        for repo in info.used_by_repositories:
            lines.append(f"    - {repo}")
        lines.append("")
    totals = summarize(usage)
    lines.append(f"Summary: {totals['actions']} actions, {totals['npm']} use npm, {totals['infected']} infected")
    return "\n".join(lines) + "\n"


def render_markdown(usage: Mapping[str, ActionUsage], org: str = "") -> str:
    totals = summarize(usage)
    lines: List[str] = []
    lines.append(f"# GitHub Actions npm Exposure Report{f' for {org}' if org else ''}\n")
    lines.append("## Summary\n")
    lines.append("| Metric | Count |\n|---|---:|")
    lines.append(f"| Actions referenced | {totals['actions']} |")
    lines.append(f"| Actions using npm | {totals['npm']} |")
    lines.append(f"| Infected actions | {totals['infected']} |")
    lines.append("\n## Limitations & Notes\n")
    lines.append("- Only `package-lock.json` is checked for versions. Actions shipping `package.json` without a lock file are reported as using npm but are not checked.")
    lines.append("- Matching is exact on `name@version`.\n")

    infected = [info for info in usage.values() if info.is_infected]
    if infected:
        lines.append("## Infected Actions\n")
        lines.append("| Action | Packages | Used in |\n|---|---|---|")
        for info in infected:
            lines.append(
                f"| {info.reference} | {', '.join(info.infected_packages)} | "
                f"{', '.join(sorted(info.used_by_repositories))} |"
            )
        lines.append("")

    lines.append("## All Actions\n")
    lines.append("| Action | Uses npm | Infected | Repositories |\n|---|---|---|---|")
    for reference, info in usage.items():
        lines.append(
            f"| {reference} | {info.uses_npm} | {info.is_infected} | "
            f"{', '.join(sorted(info.used_by_repositories))} |"
        )
    return "\n".join(lines) + "\n"


def render_html(usage: Mapping[str, ActionUsage], org: str = "") -> str:
    html_body = md.markdown(render_markdown(usage, org), extensions=["tables", "fenced_code"])
    html = [
        "<!doctype html>",
        "<html><head><meta charset=\"utf-8\"><title>GitHub Actions npm Exposure Report</title>",
        "<style>body{font-family:system-ui,Segoe UI,Roboto,Helvetica,Arial,sans-serif;padding:24px} table{border-collapse:collapse} td,th{border:1px solid #ddd;padding:6px} code{white-space:pre-wrap}</style>",
        "</head><body>",
        html_body,
        "</body></html>",
    ]
    return "\n".join(html) + "\n"


def print_results(usage: Mapping[str, ActionUsage], fmt: str = "text", *, org: str = "", stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    if fmt == "markdown":
        stream.write(render_markdown(usage, org))
    elif fmt == "html":
        stream.write(render_html(usage, org))
    else:
        stream.write(render_text(usage))
