"""Test configuration and fixtures."""

import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

from squadlens.config import Config, WorkspaceConfig, reset_config
from squadlens.provider import reset_provider
from squadlens.workspace import SquadWorkspace

TEAM_MD = """# Team

**Repository:** acme/widgets
**Owner:** Dana Scully (dana@example.com)

## Members

| Name | Role | Charter | Status |
|------|------|---------|--------|
| Banner | Backend Dev | agents/banner/charter.md | ✅ Active |
| Romanoff | Tester | agents/romanoff/charter.md | ✅ Active |
| Fury | Coordinator | — | 📋 Routing |

## Coding Agent

| Name | Role | Charter | Status |
|------|------|---------|--------|
| @copilot | Coding Agent | — | 🤖 Auto |
"""


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def squad_root(temp_dir: Path) -> Path:
    """An empty ``.squad`` folder under a workspace root."""
    squad = temp_dir / ".squad"
    squad.mkdir()
    return temp_dir


@pytest.fixture
def write_squad_file(squad_root: Path) -> Callable[[str, str], Path]:
    """Write a file relative to the squad folder, creating parents."""

    def _write(relative: str, content: str) -> Path:
        path = squad_root / ".squad" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def squad_workspace(squad_root: Path) -> SquadWorkspace:
    """A workspace pointing at the temporary squad folder."""
    config = Config(workspace=WorkspaceConfig(root=squad_root))
    return SquadWorkspace(root=squad_root, squad_dir=squad_root / ".squad", config=config)


@pytest.fixture
def team_md() -> str:
    """A team document with members, a coordinator and a coding agent."""
    return TEAM_MD


@pytest.fixture
def populated_squad(write_squad_file, squad_workspace: SquadWorkspace) -> SquadWorkspace:
    """A squad folder with a team, charters, logs and decisions."""
    write_squad_file("team.md", TEAM_MD)
    write_squad_file("agents/banner/charter.md", "# Banner\n\n**Role:** Backend Dev\n")
    write_squad_file("agents/romanoff/charter.md", "# Romanoff\n\n**Role:** Tester\n")
    write_squad_file(
        "orchestration-log/2026-02-10T0900-api-work.md",
        """# API work

**Participants:** Banner, Romanoff

## Summary

Started the pagination endpoint.

## Related Issues

- #42 Add pagination to the list endpoint
""",
    )
    write_squad_file(
        "orchestration-log/2026-02-11T1000-review.md",
        """# Test pass

**Participants:** Romanoff

## Summary

Regression suite passes, all done.
""",
    )
    write_squad_file(
        "log/2026-02-01-kickoff.md",
        """# Kickoff

**Participants:** Banner, Romanoff

## What Was Done

- **Banner:** Sketched the data model
- **Romanoff:** Wrote the test plan
""",
    )
    write_squad_file(
        "decisions.md",
        """# Decisions

## 2026-02-05: Use Postgres for storage

**By:** Banner

We need transactions.

## Keep the API read-only

**Date:** 2026-02-08
**Author:** Romanoff

Writes stay in the editor.
""",
    )
    return squad_workspace


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset global state between tests."""
    yield
    reset_config()
    reset_provider()
