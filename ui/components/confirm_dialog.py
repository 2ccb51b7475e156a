import customtkinter as ctk


class ConfirmDialog(ctk.CTkToplevel):
    """Modal yes/no confirmation dialog. Returns result via .result attribute."""

    def __init__(
        self,
        master,
        title: str,
        message: str,
        confirm_text: str = "Confirm",
        danger: bool = True,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self.title(title)
        self.result = False
        self.resizable(False, False)

        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self, text=message, wraplength=340, justify="left", padx=20, pady=16
        ).grid(row=0, column=0, sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=1, column=0, pady=(0, 16), padx=20, sticky="e")

        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._on_cancel,
        ).pack(side="left", padx=(0, 8))

        confirm_colors = (
            {"fg_color": "#EF4444", "hover_color": "#DC2626"} if danger else {}
        )
        ctk.CTkButton(
            btn_frame, text=confirm_text, width=90,
            command=self._on_confirm, **confirm_colors,
        ).pack(side="left")

        self.transient(master)
        self.grab_set()
        self._center()
        self.wait_window()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_width(), self.winfo_height()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")

    def _on_confirm(self):
        self.result = True
        self.destroy()

    def _on_cancel(self):
        self.result = False
        self.destroy()


def confirm_twice(master, title: str, first: str, second: str) -> bool:
    """Two consecutive confirmations; True only if both are accepted."""
    if not ConfirmDialog(master, title, first).result:
        return False
    return ConfirmDialog(master, title, second, confirm_text="Delete all").result
