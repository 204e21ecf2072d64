"""Exceptions raised by the store and service layers."""


class JournalError(Exception):
    """Base class for journal failures surfaced to the caller."""


class StoreNotInitialized(JournalError):
    def __init__(self, db_path: str) -> None:
        super().__init__(f"Database not initialized: {db_path}")
        self.db_path = db_path


class LocationNotFound(JournalError):
    def __init__(self, location_id: str) -> None:
        super().__init__(f"Location not found: {location_id}")
        self.location_id = location_id
