"""Roster orchestration over a store."""

from wrestling_roster_manager.services.roster_service import RosterService

__all__ = [
    "RosterService",
]
