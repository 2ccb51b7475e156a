"""Application exception hierarchy.

Every error raised on purpose by the store, the services or the backup codec
derives from ExpenseManagerError, so the UI can catch one base class and still
tell the cases apart.
"""


class ExpenseManagerError(Exception):
    """Base class for all application errors."""


class ValidationError(ExpenseManagerError, ValueError):
    """User-supplied data failed validation (empty field, bad amount, bad date)."""


class StorageError(ExpenseManagerError):
    """The storage engine rejected an operation (I/O, constraint, malformed row)."""


class DuplicateKeyError(StorageError):
    """An insert-only operation hit a key that already exists."""

    def __init__(self, kind: str, key: str):
        super().__init__(f"{kind} with key '{key}' already exists.")
        self.kind = kind
        self.key = key


class InvalidBackupError(ExpenseManagerError):
    """A backup file or snapshot is unreadable or lacks required sections."""


class ImportFailedError(ExpenseManagerError):
    """The clear-then-insert sequence of an import failed part way."""

    def __init__(self, message: str, rolled_back: bool = False):
        super().__init__(message)
        self.rolled_back = rolled_back
