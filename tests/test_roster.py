"""Tests for roster resolution."""

from datetime import date

from squadlens.models import LogEntry, MemberStatus, RosterSource
from squadlens.team.roster import RosterResolver, parse_charter_role, parse_team_document


def _resolver(squad_root, sleep=None) -> RosterResolver:
    squad = squad_root / ".squad"
    kwargs = {"sleep": sleep} if sleep else {}
    return RosterResolver(squad / "team.md", squad / "agents", **kwargs)


class TestParseTeamDocument:
    """Tests for the team document format."""

    def test_members_and_coding_agent(self, team_md):
        roster = parse_team_document(team_md)
        assert [(m.name, m.role) for m in roster.members] == [
            ("Banner", "Backend Dev"),
            ("Romanoff", "Tester"),
            ("@copilot", "Coding Agent"),
        ]

    def test_coordinator_excluded(self, team_md):
        roster = parse_team_document(team_md)
        assert "Fury" not in [m.name for m in roster.members]

    def test_badges_do_not_set_status(self, team_md):
        roster = parse_team_document(team_md)
        assert all(m.status is MemberStatus.IDLE for m in roster.members)

    def test_repository_and_owner(self, team_md):
        roster = parse_team_document(team_md)
        assert roster.repository == "acme/widgets"
        assert roster.owner == "Dana Scully"

    def test_roster_heading_alias_and_links(self):
        text = "## Roster\n\n| Name | Role |\n|---|---|\n| [Stark](agents/stark) | **Lead** |\n"
        roster = parse_team_document(text)
        assert [(m.name, m.role) for m in roster.members] == [("Stark", "Lead")]

    def test_rows_without_role_skipped(self):
        text = "## Members\n\n| Name | Role |\n|---|---|\n| Stark | |\n| Banner | Dev |\n"
        assert [m.name for m in parse_team_document(text).members] == ["Banner"]

    def test_no_table(self):
        roster = parse_team_document("# Team\n\nNobody yet.\n")
        assert roster.members == []
        assert roster.repository is None


def test_parse_charter_role():
    assert parse_charter_role("# Stark\n\n- **Role:** Lead Architect\n") == "Lead Architect"
    assert parse_charter_role("# Stark\n") is None


class TestRosterResolver:
    """Tests for the three resolution tiers."""

    def test_team_file_tier(self, write_squad_file, squad_root, team_md):
        write_squad_file("team.md", team_md)
        result = _resolver(squad_root).resolve()

        assert result.source is RosterSource.TEAM_FILE
        assert len(result.members) == 3
        assert result.repository == "acme/widgets"

    def test_agents_folder_tier(self, write_squad_file, squad_root):
        write_squad_file("agents/stark/charter.md", "**Role:** Lead\n")
        write_squad_file("agents/banner/notes.md", "no charter role here\n")
        write_squad_file("agents/_alumni/old/charter.md", "**Role:** Retired\n")
        write_squad_file("agents/Scribe/charter.md", "**Role:** Scribe\n")

        result = _resolver(squad_root).resolve()

        assert result.source is RosterSource.AGENTS_FOLDER
        assert [(m.name, m.role) for m in result.members] == [
            ("Banner", "Squad Member"),
            ("Stark", "Lead"),
        ]

    def test_log_participants_tier(self, squad_root):
        entries = [
            LogEntry(date=date(2026, 2, 10), topic="a", participants=["Stark", "Banner"]),
            LogEntry(date=date(2026, 2, 9), topic="b", participants=["Banner", "Romanoff"]),
        ]
        result = _resolver(squad_root).resolve(entries)

        assert result.source is RosterSource.LOG_PARTICIPANTS
        assert [m.name for m in result.members] == ["Stark", "Banner", "Romanoff"]

    def test_nothing_found(self, squad_root):
        result = _resolver(squad_root).resolve()
        assert result.source is RosterSource.NONE
        assert result.members == []

    def test_empty_team_file_retried_once(self, write_squad_file, squad_root, team_md):
        path = write_squad_file("team.md", "# Team\n")
        delays = []

        def fake_sleep(seconds: float) -> None:
            delays.append(seconds)
            path.write_text(team_md, encoding="utf-8")

        result = _resolver(squad_root, sleep=fake_sleep).resolve()

        assert delays == [1.5]
        assert result.source is RosterSource.TEAM_FILE
        assert len(result.members) == 3

    def test_missing_team_file_not_retried(self, squad_root):
        delays = []
        _resolver(squad_root, sleep=delays.append).read_team_file()
        assert delays == []

    def test_empty_team_file_falls_through_after_retry(self, write_squad_file, squad_root):
        write_squad_file("team.md", "# Team\n\n**Repository:** acme/widgets\n")
        write_squad_file("agents/stark/charter.md", "**Role:** Lead\n")
        delays = []

        result = _resolver(squad_root, sleep=delays.append).resolve()

        assert len(delays) == 1
        assert result.source is RosterSource.AGENTS_FOLDER
        assert result.repository == "acme/widgets"
