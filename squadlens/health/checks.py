"""Diagnostic checks over a squad folder."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from squadlens.decisions.parser import DecisionParser
from squadlens.ingest.base import DocumentSource, FileSystemSource
from squadlens.logs.discovery import LogDiscovery
from squadlens.team.roster import parse_team_document
from squadlens.workspace import SquadWorkspace


class CheckStatus(str, Enum):
    """Outcome of a single check."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


STATUS_ICONS = {
    CheckStatus.PASS: "✅",
    CheckStatus.WARN: "⚠️",
    CheckStatus.FAIL: "❌",
}


@dataclass(frozen=True)
class HealthCheckResult:
    """Result of one health check, with a fix hint when it did not pass."""

    name: str
    status: CheckStatus
    message: str
    fix: str | None = None


def check_team_file(workspace: SquadWorkspace, source: DocumentSource) -> HealthCheckResult:
    """Team document exists, is readable and lists members."""
    name = workspace.team_file.name
    folder = workspace.squad_dir.name
    if not source.exists(workspace.team_file):
        return HealthCheckResult(
            name=name,
            status=CheckStatus.FAIL,
            message=f"{name} not found at {folder}/{name}",
            fix=f"Create a {name} file in the {folder}/ directory.",
        )

    text = source.read_text(workspace.team_file)
    if text is None:
        return HealthCheckResult(
            name=name,
            status=CheckStatus.FAIL,
            message=f"{name} exists but could not be read",
            fix=f"Check the permissions of {folder}/{name}.",
        )

    roster = parse_team_document(text, workspace.config.roster)
    if not roster.members:
        return HealthCheckResult(
            name=name,
            status=CheckStatus.WARN,
            message=f"{name} parsed but no members found",
            fix="Add a Members or Roster table with at least one team member row.",
        )

    return HealthCheckResult(
        name=name,
        status=CheckStatus.PASS,
        message=f"{name} OK, {len(roster.members)} member(s) found",
    )


def check_agent_charters(
    workspace: SquadWorkspace, source: DocumentSource
) -> HealthCheckResult:
    """Every agent folder carries a charter."""
    name = "Agent Charters"
    folder = workspace.squad_dir.name
    charter = workspace.config.roster.charter_file
    entries = source.list_dir(workspace.agents_dir)
    if entries is None:
        return HealthCheckResult(
            name=name,
            status=CheckStatus.WARN,
            message=f"No agents/ directory found at {folder}/{workspace.agents_dir.name}/",
            fix="Create one subdirectory per agent, each with a charter.",
        )

    agent_dirs = [
        entry.name for entry in entries if entry.is_dir and not entry.name.startswith("_")
    ]
    if not agent_dirs:
        return HealthCheckResult(
            name=name,
            status=CheckStatus.WARN,
            message="agents/ directory exists but contains no agent folders",
            fix=f"Add agent subdirectories with {charter} files.",
        )

    missing = [
        agent for agent in agent_dirs if not source.exists(workspace.agents_dir / agent / charter)
    ]
    if missing:
        agents_folder = f"{folder}/{workspace.agents_dir.name}"
        targets = ", ".join(f"{agents_folder}/{agent}/{charter}" for agent in missing)
        return HealthCheckResult(
            name=name,
            status=CheckStatus.FAIL,
            message=f"Missing {charter} in: {', '.join(missing)}",
            fix=f"Create {targets}",
        )

    return HealthCheckResult(
        name=name,
        status=CheckStatus.PASS,
        message=f"All {len(agent_dirs)} agent(s) have {charter}",
    )


def check_logs(workspace: SquadWorkspace, source: DocumentSource) -> HealthCheckResult:
    """Log documents are discovered and readable."""
    name = "Logs"
    discovery = LogDiscovery(workspace.squad_dir, source, workspace.config.logs)
    files = discovery.display_all()
    if not files:
        dirs = " or ".join(f"{workspace.squad_dir.name}/{d.name}/" for d in discovery.directories)
        return HealthCheckResult(
            name=name,
            status=CheckStatus.WARN,
            message="No log files found",
            fix=f"Create .md log files in {dirs}.",
        )

    unreadable = [path.name for path in files if source.read_text(path) is None]
    if unreadable:
        return HealthCheckResult(
            name=name,
            status=CheckStatus.FAIL,
            message=f"{len(unreadable)} log file(s) could not be read: {', '.join(unreadable)}",
            fix="Check the listed files for permission or encoding problems.",
        )

    return HealthCheckResult(
        name=name,
        status=CheckStatus.PASS,
        message=f"All {len(files)} log file(s) readable",
    )


def check_decisions(workspace: SquadWorkspace, source: DocumentSource) -> HealthCheckResult:
    """The decision record parses into at least one decision."""
    name = "Decisions"
    if not source.exists(workspace.decisions_file) and source.list_dir(
        workspace.decisions_dir
    ) is None:
        return HealthCheckResult(
            name=name,
            status=CheckStatus.WARN,
            message="No decision record found",
            fix=f"Record decisions in {workspace.squad_dir.name}/{workspace.decisions_file.name}.",
        )

    parser = DecisionParser(source, workspace.config.decisions)
    decisions = parser.load(workspace.decisions_file, workspace.decisions_dir)
    if not decisions:
        return HealthCheckResult(
            name=name,
            status=CheckStatus.WARN,
            message="Decision record exists but no decisions were recognized",
            fix="Use '## Title' or '# Decision: Title' headings.",
        )

    undated = sum(1 for decision in decisions if not decision.date)
    message = f"{len(decisions)} decision(s) parsed"
    if undated:
        message += f", {undated} without a date"
    return HealthCheckResult(name=name, status=CheckStatus.PASS, message=message)


def run_all(
    workspace: SquadWorkspace, source: DocumentSource | None = None
) -> list[HealthCheckResult]:
    """Run every check in a fixed order."""
    source = source or FileSystemSource()
    return [
        check_team_file(workspace, source),
        check_agent_charters(workspace, source),
        check_logs(workspace, source),
        check_decisions(workspace, source),
    ]


def format_results(results: list[HealthCheckResult]) -> str:
    """Render results as a plain-text report with a summary line."""
    lines = ["Squad Health Check Results", "═" * 40, ""]
    for result in results:
        lines.append(f"{STATUS_ICONS[result.status]} {result.name}: {result.message}")
        if result.fix:
            lines.append(f"   Fix: {result.fix}")

    passed = sum(1 for r in results if r.status is CheckStatus.PASS)
    warned = sum(1 for r in results if r.status is CheckStatus.WARN)
    failed = sum(1 for r in results if r.status is CheckStatus.FAIL)
    lines.append("")
    lines.append(f"Summary: {passed} passed, {warned} warning(s), {failed} failed")
    return "\n".join(lines)
