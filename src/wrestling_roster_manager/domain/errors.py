from dataclasses import dataclass


@dataclass(frozen=True)
class RosterError:
    message: str


@dataclass(frozen=True)
class ValidationError(RosterError):
    field: str = ""


@dataclass(frozen=True)
class IneligibleAssignmentError(RosterError):
    wrestler_id: str = ""
    team_id: str = ""
    slot: str | None = None


@dataclass(frozen=True)
class ConsistencyViolation(RosterError):
    entity_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConfigError(RosterError):
    key: str = ""
