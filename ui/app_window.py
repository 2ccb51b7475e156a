import logging
import os
from tkinter import filedialog, messagebox

import customtkinter as ctk
from database.db_manager import DatabaseManager
from models.transaction import Transaction
from services.budget_service import BudgetService
from services.data_service import DataService, backup_filename
from services.transaction_service import TransactionService
from ui.components.budget_form import BudgetForm
from ui.components.confirm_dialog import ConfirmDialog, confirm_twice
from ui.components.transaction_form import TransactionForm
from utils.app_config import get_db_folder, set_db_folder
from utils.constants import (
    APP_HEIGHT,
    APP_NAME,
    APP_WIDTH,
    PAYMENT_METHOD_LABELS,
    STATUS_COLORS,
)
from utils.currency import format_currency
from utils.date_helpers import (
    current_month_str,
    format_display_date,
    friendly_month,
    is_valid_month,
    next_month,
    prev_month,
)
from utils.exceptions import (
    DuplicateKeyError,
    ExpenseManagerError,
    ImportFailedError,
    InvalidBackupError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; subclasses before their bases.
_ERROR_TITLES = {
    ValidationError: "Invalid Input",
    DuplicateKeyError: "Duplicate Entry",
    InvalidBackupError: "Invalid Backup",
    ImportFailedError: "Restore Failed",
    StorageError: "Storage Error",
}


def error_title(error: ExpenseManagerError) -> str:
    return next((t for cls, t in _ERROR_TITLES.items() if isinstance(error, cls)), "Error")


class AppWindow(ctk.CTk):
    def __init__(
        self,
        db: DatabaseManager,
        tx_service: TransactionService,
        budget_service: BudgetService,
        data_service: DataService,
        initial_month: str | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._db = db
        self._tx_svc = tx_service
        self._budget_svc = budget_service
        self._data_svc = data_service
        self._currency = db.get_setting("currency_symbol", "$")
        self._month = initial_month if is_valid_month(initial_month or "") else current_month_str()

        self.title(APP_NAME)
        self.minsize(APP_WIDTH, APP_HEIGHT)
        self.geometry(f"{APP_WIDTH}x{APP_HEIGHT}")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_month_bar()
        self._build_summary()
        self._build_list()
        self._build_data_section()
        self.refresh()

    @property
    def current_month(self) -> str:
        return self._month

    # ── Month bar ─────────────────────────────────────────────────────────────
    def _build_month_bar(self):
        bar = ctk.CTkFrame(self, fg_color="transparent")
        bar.grid(row=0, column=0, sticky="ew", padx=12, pady=(12, 4))
        bar.grid_columnconfigure(1, weight=1)

        ctk.CTkButton(bar, text="◀", width=36, command=self._prev_month).grid(row=0, column=0)
        self._month_label = ctk.CTkLabel(
            bar, text="", font=ctk.CTkFont(size=16, weight="bold")
        )
        self._month_label.grid(row=0, column=1)
        ctk.CTkButton(bar, text="▶", width=36, command=self._next_month).grid(row=0, column=2)

    def _prev_month(self):
        self._month = prev_month(self._month)
        self.refresh()

    def _next_month(self):
        self._month = next_month(self._month)
        self.refresh()

    # ── Summary card ──────────────────────────────────────────────────────────
    def _build_summary(self):
        card = ctk.CTkFrame(self, corner_radius=12)
        card.grid(row=1, column=0, sticky="ew", padx=12, pady=4)
        card.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(card, text="REMAINING", font=ctk.CTkFont(size=11), anchor="w").grid(
            row=0, column=0, sticky="w", padx=12, pady=(10, 0)
        )
        self._remaining_label = ctk.CTkLabel(
            card, text="", font=ctk.CTkFont(size=28, weight="bold"), anchor="w"
        )
        self._remaining_label.grid(row=1, column=0, sticky="w", padx=12)

        limit_frame = ctk.CTkFrame(card, fg_color="transparent")
        limit_frame.grid(row=0, column=1, rowspan=2, sticky="e", padx=12, pady=(10, 0))
        ctk.CTkLabel(limit_frame, text="MONTHLY LIMIT", font=ctk.CTkFont(size=11)).pack(anchor="e")
        self._limit_button = ctk.CTkButton(
            limit_frame, text="", width=110,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._edit_limit,
        )
        self._limit_button.pack(anchor="e")

        self._progress = ctk.CTkProgressBar(card)
        self._progress.grid(row=2, column=0, columnspan=2, sticky="ew", padx=12, pady=8)

        self._totals_label = ctk.CTkLabel(card, text="", anchor="w")
        self._totals_label.grid(row=3, column=0, columnspan=2, sticky="w", padx=12, pady=(0, 10))

    def _edit_limit(self):
        form = BudgetForm(self, self._budget_svc, self._month)
        self.wait_window(form)
        if form.saved:
            self.refresh()

    # ── Expense list ──────────────────────────────────────────────────────────
    def _build_list(self):
        outer = ctk.CTkFrame(self, fg_color="transparent")
        outer.grid(row=2, column=0, sticky="nsew", padx=12, pady=4)
        outer.grid_columnconfigure(0, weight=1)
        outer.grid_rowconfigure(1, weight=1)

        head = ctk.CTkFrame(outer, fg_color="transparent")
        head.grid(row=0, column=0, sticky="ew")
        ctk.CTkLabel(head, text="Expenses", font=ctk.CTkFont(size=14, weight="bold")).pack(
            side="left"
        )
        ctk.CTkButton(head, text="+ Add", width=70, command=self._open_add_form).pack(side="right")

        self._scroll = ctk.CTkScrollableFrame(outer)
        self._scroll.grid(row=1, column=0, sticky="nsew", pady=(4, 0))
        self._scroll.grid_columnconfigure(0, weight=1)

    def _render_list(self, transactions: list[Transaction]):
        for child in self._scroll.winfo_children():
            child.destroy()
        if not transactions:
            ctk.CTkLabel(self._scroll, text="No expenses this month.", text_color="gray").grid(
                row=0, column=0, pady=16
            )
            return
        for idx, tx in enumerate(transactions):
            self._add_row(idx, tx)

    def _add_row(self, idx: int, tx: Transaction):
        bg = ("gray92", "gray17") if idx % 2 == 0 else ("gray88", "gray21")
        row = ctk.CTkFrame(self._scroll, fg_color=bg, corner_radius=4)
        row.grid(row=idx, column=0, sticky="ew", pady=1, padx=2)
        row.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(row, text=tx.description, anchor="w").grid(
            row=0, column=0, sticky="w", padx=8, pady=(4, 0)
        )
        when = format_display_date(tx.date) + (f" · {tx.time}" if tx.time else "")
        ctk.CTkLabel(
            row, text=f"{when} · {PAYMENT_METHOD_LABELS.get(tx.method, tx.method)}",
            anchor="w", font=ctk.CTkFont(size=11), text_color="gray",
        ).grid(row=1, column=0, sticky="w", padx=8, pady=(0, 4))

        ctk.CTkLabel(row, text=format_currency(tx.amount, self._currency), anchor="e").grid(
            row=0, column=1, rowspan=2, padx=4
        )

        acts = ctk.CTkFrame(row, fg_color="transparent")
        acts.grid(row=0, column=2, rowspan=2, padx=(4, 6))
        ctk.CTkButton(
            acts, text="Edit", width=44, height=24,
            command=lambda t=tx: self._open_edit_form(t),
        ).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Del", width=38, height=24,
            fg_color="#EF4444", hover_color="#DC2626",
            command=lambda t=tx: self._delete_tx(t),
        ).pack(side="left")

    def _open_add_form(self):
        form = TransactionForm(self, self._tx_svc)
        self.wait_window(form)
        if form.saved:
            self.refresh()

    def _open_edit_form(self, tx: Transaction):
        form = TransactionForm(self, self._tx_svc, transaction=tx)
        self.wait_window(form)
        if form.saved:
            self.refresh()

    def _delete_tx(self, tx: Transaction):
        dlg = ConfirmDialog(
            self, "Delete Expense",
            f"Delete '{tx.description}' of {format_currency(tx.amount, self._currency)}?",
        )
        if dlg.result:
            self._run(lambda: self._tx_svc.delete(tx.id))
            self.refresh()

    # ── Data management ───────────────────────────────────────────────────────
    def _build_data_section(self):
        section = ctk.CTkFrame(self, corner_radius=8)
        section.grid(row=3, column=0, sticky="ew", padx=12, pady=(4, 12))
        section.grid_columnconfigure((0, 1, 2), weight=1)

        ctk.CTkButton(section, text="Backup…", command=self._export).grid(
            row=0, column=0, padx=4, pady=8, sticky="ew"
        )
        ctk.CTkButton(
            section, text="Restore…",
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._import,
        ).grid(row=0, column=1, padx=4, pady=8, sticky="ew")
        ctk.CTkButton(
            section, text="Clear all",
            fg_color="#EF4444", hover_color="#DC2626",
            command=self._clear_all,
        ).grid(row=0, column=2, padx=4, pady=8, sticky="ew")

        self._status_var = ctk.StringVar()
        ctk.CTkLabel(
            section, textvariable=self._status_var,
            font=ctk.CTkFont(size=11), anchor="w",
        ).grid(row=1, column=0, columnspan=3, sticky="w", padx=8, pady=(0, 6))

        self._db_folder_var = ctk.StringVar(value=get_db_folder() or "(default: app folder)")
        ctk.CTkEntry(
            section, textvariable=self._db_folder_var, state="readonly",
        ).grid(row=2, column=0, padx=(8, 4), pady=(0, 8), sticky="ew")
        ctk.CTkButton(
            section, text="DB folder…", command=self._browse_db_folder,
        ).grid(row=2, column=1, padx=4, pady=(0, 8), sticky="ew")
        ctk.CTkButton(
            section, text="Default folder",
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._reset_db_folder,
        ).grid(row=2, column=2, padx=4, pady=(0, 8), sticky="ew")

    def _browse_db_folder(self):
        path = filedialog.askdirectory(title="Choose DB folder")
        if path:
            set_db_folder(path)
            self._db_folder_var.set(path)
            self._status_var.set("Restart the app for the new DB folder to take effect.")

    def _reset_db_folder(self):
        set_db_folder(None)
        self._db_folder_var.set("(default: app folder)")
        self._status_var.set("Restart the app for the new DB folder to take effect.")

    def _export(self):
        path = filedialog.asksaveasfilename(
            title="Save Backup",
            initialfile=backup_filename(),
            defaultextension=".json",
            filetypes=[("JSON files", "*.json"), ("All files", "*.*")],
        )
        if not path:
            return
        if self._run(lambda: self._data_svc.write_backup(path)) is not None:
            self._status_var.set(f"Backup saved to {os.path.basename(path)}")

    def _import(self):
        path = filedialog.askopenfilename(
            title="Restore Backup",
            filetypes=[("JSON files", "*.json"), ("All files", "*.*")],
        )
        if not path:
            return
        dlg = ConfirmDialog(
            self, "Restore Backup",
            f"This will OVERWRITE all current data with the contents of "
            f"'{os.path.basename(path)}'. Continue?",
            confirm_text="Restore",
        )
        if not dlg.result:
            return
        stats = self._run(lambda: self._data_svc.restore_backup(path))
        if stats is not None:
            self._status_var.set(
                f"Restored {stats['transactions']} expenses, {stats['budgets']} limits."
            )
        self.refresh()

    def _clear_all(self):
        if not confirm_twice(
            self, "Clear All Data",
            "DANGER: this deletes ALL expenses and limits for every month. Are you sure?",
            "Last chance: all data will be lost. Clear everything?",
        ):
            return
        if self._run(self._data_svc.clear_all, ok=True):
            self._status_var.set("All data deleted.")
        self.refresh()

    # ── Helpers ───────────────────────────────────────────────────────────────
    def _run(self, action, ok=None):
        """Call action; show a typed error box on ExpenseManagerError."""
        try:
            result = action()
        except ExpenseManagerError as e:
            messagebox.showerror(error_title(e), str(e), parent=self)
            return None
        return ok if ok is not None else result

    def refresh(self):
        self._month_label.configure(text=friendly_month(self._month))
        try:
            transactions = self._tx_svc.list_for_month(self._month)
            summary = self._budget_svc.get_month_summary(self._month)
        except ExpenseManagerError as e:
            logger.error("Failed to load %s: %s", self._month, e)
            messagebox.showerror("Load Failed", str(e), parent=self)
            return

        color = STATUS_COLORS[summary.status]
        self._remaining_label.configure(
            text=format_currency(summary.remaining, self._currency), text_color=color
        )
        self._limit_button.configure(
            text=format_currency(summary.limit, self._currency) if summary.limit else "Set limit"
        )
        self._progress.configure(progress_color=color)
        self._progress.set(summary.percentage)
        self._totals_label.configure(
            text=(
                f"Spent {format_currency(summary.total_spent, self._currency)}  ·  "
                f"Debit {format_currency(summary.spent_debit, self._currency)}  ·  "
                f"Credit {format_currency(summary.spent_credit, self._currency)}"
            )
        )
        self._render_list(transactions)
