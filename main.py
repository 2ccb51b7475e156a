import logging
import os
import sys
import customtkinter as ctk

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO
from database.budget_dao import BudgetDAO

from services.transaction_service import TransactionService
from services.budget_service import BudgetService
from services.data_service import DataService

from ui.app_window import AppWindow
from utils.app_config import db_path_for, get_db_folder, get_log_level
from utils.constants import DB_FILE
from utils.log import configure_logging

logger = logging.getLogger(__name__)


def main():
    # ── Bootstrap: logging and DB folder from pre-DB config ───────────────────
    configure_logging(get_log_level())
    db_path = db_path_for(get_db_folder(), DB_FILE)

    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager(db_path).open()
    logger.info("Using database %s", db_path)

    # ── DAOs ─────────────────────────────────────────────────────────────────
    tx_dao = TransactionDAO(db)
    budget_dao = BudgetDAO(db)

    # ── Services ─────────────────────────────────────────────────────────────
    tx_svc = TransactionService(tx_dao)
    budget_svc = BudgetService(budget_dao, tx_svc)
    data_svc = DataService(db, tx_dao, budget_dao)

    # ── Appearance ───────────────────────────────────────────────────────────
    ctk.set_appearance_mode(db.get_setting("appearance_mode", "system"))
    ctk.set_default_color_theme("blue")

    # ── Launch UI ────────────────────────────────────────────────────────────
    app = AppWindow(
        db=db,
        tx_service=tx_svc,
        budget_service=budget_svc,
        data_service=data_svc,
        initial_month=db.get_setting("last_month", ""),
    )

    # Remember the viewed month on close
    def on_close():
        db.set_setting("last_month", app.current_month)
        db.close()
        app.destroy()

    app.protocol("WM_DELETE_WINDOW", on_close)
    app.mainloop()


if __name__ == "__main__":
    main()
