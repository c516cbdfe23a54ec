"""Error taxonomy shared by the use cases and the stores"""


class TimetableError(Exception):
    pass


class ValidationError(TimetableError, ValueError):
    """Input rejected before any write."""


class NotFoundError(TimetableError):
    def __init__(self, entity: str, identifier: str):
        super().__init__(f"{entity} {identifier} not found")
        self.entity = entity
        self.identifier = identifier


class InvalidIdentifierError(TimetableError):
    def __init__(self, identifier: str):
        super().__init__(f"Invalid identifier format: {identifier}")
        self.identifier = identifier


class DependencyUnavailableError(TimetableError):
    pass


class PartialBatchFailureError(TimetableError):
    """
    Some occurrences of a recurring save were persisted before a write failed.

    Persisted occurrences are kept; `created` lists them.
    """

    def __init__(self, created: list, total: int):
        super().__init__(f"Created {len(created)} of {total} events before a write failed")
        self.created = created
        self.total = total

    @property
    def created_count(self) -> int:
        return len(self.created)
