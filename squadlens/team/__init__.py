"""Roster resolution and member status."""

from squadlens.team.roster import RosterResolver, RosterResult, parse_team_document
from squadlens.team.status import StatusEngine, classify_task

__all__ = [
    "RosterResolver",
    "RosterResult",
    "StatusEngine",
    "classify_task",
    "parse_team_document",
]
