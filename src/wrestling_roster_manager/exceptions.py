class RosterException(Exception):
    """Base class for store and infrastructure failures."""


class CommitFailure(RosterException):
    def __init__(self, message: str, *, mutation_count: int = 0) -> None:
        self.mutation_count = mutation_count
        super().__init__(message)


class EntityNotFoundError(RosterException):
    def __init__(self, kind: str, entity_id: str) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"No {kind} with id {entity_id!r}")
