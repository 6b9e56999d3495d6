# tooltip.py

import tkinter as tk


class Tooltip:
    """Hover hint for toolbar widgets, shown after a short delay."""

    def __init__(self, widget, text, delay_ms=400):
        self.widget = widget
        self.text = text
        self.delay_ms = delay_ms
        self.tooltip_window = None
        self._pending = None
        self.widget.bind("<Enter>", self._schedule, add="+")
        self.widget.bind("<Leave>", self.hide_tooltip, add="+")
        self.widget.bind("<ButtonPress>", self.hide_tooltip, add="+")

    def _schedule(self, event=None):
        self._cancel()
        self._pending = self.widget.after(self.delay_ms, self.show_tooltip)

    def _cancel(self):
        if self._pending:
            self.widget.after_cancel(self._pending)
            self._pending = None

    def show_tooltip(self):
        self._pending = None
        if self.tooltip_window or not self.text:
            return

        x = self.widget.winfo_rootx() + 20
        y = self.widget.winfo_rooty() + self.widget.winfo_height() + 4

        self.tooltip_window = tk.Toplevel(self.widget)
        self.tooltip_window.wm_overrideredirect(True)
        self.tooltip_window.wm_geometry(f"+{x}+{y}")
        tk.Label(self.tooltip_window, text=self.text, background="#FFFFE0",
                 relief="solid", borderwidth=1, font=("tahoma", "8", "normal")).pack(padx=1, pady=1)

    def hide_tooltip(self, event=None):
        self._cancel()
        if self.tooltip_window:
            self.tooltip_window.destroy()
        self.tooltip_window = None
