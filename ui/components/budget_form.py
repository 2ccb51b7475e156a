import customtkinter as ctk
from services.budget_service import BudgetService
from utils.currency import parse_amount
from utils.date_helpers import friendly_month
from utils.exceptions import ExpenseManagerError


class BudgetForm(ctk.CTkToplevel):
    """Set the spending limit for one month. 0 clears it."""

    def __init__(self, master, budget_service: BudgetService, month: str, **kwargs):
        super().__init__(master, **kwargs)
        self._svc = budget_service
        self._month = month
        self.saved = False

        self.title("Monthly Limit")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(self, text="Month:").grid(
            row=0, column=0, padx=(16, 8), pady=(16, 4), sticky="e"
        )
        ctk.CTkLabel(self, text=friendly_month(month), anchor="w").grid(
            row=0, column=1, padx=(0, 16), pady=(16, 4), sticky="ew"
        )

        ctk.CTkLabel(self, text="Limit:").grid(
            row=1, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        current = budget_service.get_budget(month)
        self._limit_var = ctk.StringVar(value=f"{current:.2f}" if current else "")
        ctk.CTkEntry(self, textvariable=self._limit_var, width=180).grid(
            row=1, column=1, padx=(0, 16), pady=4, sticky="ew"
        )

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#EF4444", wraplength=260, anchor="w",
        ).grid(row=2, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=3, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        ctk.CTkButton(btn_frame, text="Save", width=90, command=self._on_save).pack(side="right")

        self.transient(master)
        self.grab_set()

    def _on_save(self):
        text = self._limit_var.get()
        limit = parse_amount(text) if text.strip() else 0.0
        if limit is None:
            self._error_var.set("Invalid amount.")
            return
        try:
            self._svc.set_budget(self._month, limit)
        except ExpenseManagerError as e:
            self._error_var.set(str(e))
            return
        self.saved = True
        self.destroy()
