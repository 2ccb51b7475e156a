"""Tests for the window's error-dialog titles (no Tk root is created)."""

import pytest

pytest.importorskip("customtkinter")

from ui.app_window import error_title  # noqa: E402
from utils.exceptions import (  # noqa: E402
    DuplicateKeyError,
    ExpenseManagerError,
    ImportFailedError,
    InvalidBackupError,
    StorageError,
    ValidationError,
)


@pytest.mark.parametrize(
    "error, title",
    [
        (ValidationError("Description is required."), "Invalid Input"),
        (DuplicateKeyError("Transaction", "tx-1"), "Duplicate Entry"),
        (InvalidBackupError("missing 'budgets'"), "Invalid Backup"),
        (ImportFailedError("boom", rolled_back=True), "Restore Failed"),
        (StorageError("disk full"), "Storage Error"),
        (ExpenseManagerError("other"), "Error"),
    ],
)
def test_each_error_type_has_its_own_title(error, title):
    assert error_title(error) == title
