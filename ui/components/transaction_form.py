import customtkinter as ctk
from services.transaction_service import TransactionService
from models.transaction import Transaction
from utils.constants import PAYMENT_METHODS, PAYMENT_METHOD_LABELS
from utils.currency import parse_amount
from utils.date_helpers import now_time_str, today_str
from utils.exceptions import ExpenseManagerError


class TransactionForm(ctk.CTkToplevel):
    """Add or edit an expense."""

    _last_date: str = today_str()  # reset to today on each app launch

    def __init__(
        self,
        master,
        tx_service: TransactionService,
        transaction: Transaction | None = None,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._tx_svc = tx_service
        self._transaction = transaction
        self.saved = False

        tx = transaction
        self.title("Edit Expense" if tx else "New Expense")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        r = 0
        self._label("Description:", r)
        self._desc_var = ctk.StringVar(value=tx.description if tx else "")
        ctk.CTkEntry(self, textvariable=self._desc_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew"
        )
        r += 1

        self._label("Amount:", r)
        self._amount_var = ctk.StringVar(value=f"{tx.amount:.2f}" if tx else "")
        ctk.CTkEntry(self, textvariable=self._amount_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        self._label("Paid with:", r)
        self._method_var = ctk.StringVar(value=tx.method if tx else PAYMENT_METHODS[0])
        method_frame = ctk.CTkFrame(self, fg_color="transparent")
        method_frame.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        for m in PAYMENT_METHODS:
            ctk.CTkRadioButton(
                method_frame, text=PAYMENT_METHOD_LABELS[m],
                variable=self._method_var, value=m,
            ).pack(side="left", padx=4)
        r += 1

        self._label("Date (YYYY-MM-DD):", r)
        self._date_var = ctk.StringVar(value=tx.date if tx else TransactionForm._last_date)
        ctk.CTkEntry(self, textvariable=self._date_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        self._label("Time (HH:MM):", r)
        self._time_var = ctk.StringVar(value=tx.time if tx else now_time_str())
        ctk.CTkEntry(self, textvariable=self._time_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#EF4444", wraplength=300, anchor="w",
        ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=r, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        ctk.CTkButton(
            btn_frame, text="Save" if tx else "Add", width=90, command=self._on_save
        ).pack(side="right")

        self.transient(master)
        self.grab_set()
        self._center()

    def _label(self, text, row):
        ctk.CTkLabel(self, text=text).grid(
            row=row, column=0, padx=(16, 8), pady=4, sticky="e"
        )

    def _on_save(self):
        amount = parse_amount(self._amount_var.get())
        if amount is None:
            self._error_var.set("Invalid amount.")
            return
        fields = dict(
            description=self._desc_var.get(),
            amount=amount,
            method=self._method_var.get(),
            date=self._date_var.get().strip(),
            time=self._time_var.get().strip(),
        )
        try:
            if self._transaction:
                self._tx_svc.update(self._transaction.id, **fields)
            else:
                self._tx_svc.create(**fields)
        except ExpenseManagerError as e:
            self._error_var.set(str(e))
            return
        TransactionForm._last_date = fields["date"]
        self.saved = True
        self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
