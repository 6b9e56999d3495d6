# view.py
import tkinter as tk
from tkinter import ttk
from collections import deque
from PIL import Image, ImageTk
import ctypes

from tooltip import Tooltip
from config import THEMES, RENDER_BUFFER_PAGES, DEFAULT_SCALE


class View(tk.Tk):
    """
    The View class responsible for the entire GUI of the PDF Marker.
    """
    def __init__(self):
        super().__init__()

        self.theme = THEMES["dark"]
        self.buffer_pages = RENDER_BUFFER_PAGES

        self.page_count = 0
        self.current_page = 0
        self.zoom = DEFAULT_SCALE

        self.page_dims = []
        self.page_positions = []
        self.page_images = {}
        self.cache = {}
        self.cache_keys = deque()
        self.canvas_items = []

        self.search_active = False

        self._setup_window()
        self._setup_styles()
        self._create_widgets()
        self._bind_ui_events()

    def _setup_window(self):
        self.title("PDF Marker")
        self.geometry("1100x900")
        self.configure(bg=self.theme["bg"])
        try:
            ctypes.windll.shcore.SetProcessDpiAwareness(1)
        except (AttributeError, OSError):
            pass

    def _setup_styles(self):
        self.style = ttk.Style()
        try:
            self.style.theme_use('clam')
        except tk.TclError:
            pass
        self.style.configure('TButton', background=self.theme['btn_bg'], foreground=self.theme['fg'], borderwidth=1,
                             focusthickness=3, focuscolor='none')
        self.style.map('TButton', background=[('active', '#5A5A5A')])
        self.style.configure('Save.TButton', background=self.theme['save_bg'], foreground=self.theme['fg'])
        self.style.configure('TEntry', fieldbackground=self.theme['entry_bg'], foreground=self.theme['fg'],
                             insertcolor=self.theme['fg'])
        self.style.configure('TFrame', background=self.theme['bg'])
        self.style.configure('TLabel', background=self.theme['bg'], foreground=self.theme['fg'])

    def _create_widgets(self):
        self.placeholder = ImageTk.PhotoImage(Image.new("RGBA", (16, 16), (0, 0, 0, 0)))

        self._create_toolbar()
        self._create_main_content()
        self._create_statusbar()

    def _create_toolbar(self):
        toolbar = ttk.Frame(self, style='TFrame', padding=5)
        toolbar.pack(side=tk.TOP, fill=tk.X)

        btn_open = ttk.Button(toolbar, text="Open", command=self.open_pdf)
        btn_open.pack(side=tk.LEFT, padx=5)
        Tooltip(btn_open, "Open PDF (Ctrl+O)")

        ttk.Separator(toolbar, orient=tk.VERTICAL).pack(side=tk.LEFT, padx=5, fill='y')

        btn_zoom_out = ttk.Button(toolbar, text="−", command=self._zoom_out, width=3)
        btn_zoom_out.pack(side=tk.LEFT, padx=(5, 0))
        self.zoom_label = ttk.Label(toolbar, width=6, anchor="center", text=f"{self.zoom * 100:.0f}%")
        self.zoom_label.pack(side=tk.LEFT, padx=2)
        btn_zoom_in = ttk.Button(toolbar, text="+", command=self._zoom_in, width=3)
        btn_zoom_in.pack(side=tk.LEFT, padx=(0, 5))
        Tooltip(btn_zoom_in, "Zoom in (Ctrl+Plus)")
        Tooltip(btn_zoom_out, "Zoom out (Ctrl+Minus)")

        ttk.Separator(toolbar, orient=tk.VERTICAL).pack(side=tk.LEFT, padx=5, fill='y')

        self.search_entry = ttk.Entry(toolbar, width=40, state=tk.DISABLED)
        self.search_entry.pack(side=tk.LEFT, padx=5, ipady=1)
        self.search_entry.bind("<Return>", self._search_event)
        Tooltip(self.search_entry, "Type a search term and press Enter (Ctrl+F)")

        self.save_btn = ttk.Button(toolbar, text="Save PDF with highlights", style='Save.TButton',
                                   state=tk.DISABLED, command=self.save_pdf_with_highlights)
        self.save_btn.pack(side=tk.LEFT, padx=5)

    def _create_main_content(self):
        main_frame = ttk.Frame(self, style='TFrame')
        main_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=10)
        self.canvas = tk.Canvas(main_frame, bg=self.theme["canvas_bg"], highlightthickness=0)
        self.scroll_y = ttk.Scrollbar(main_frame, orient=tk.VERTICAL, command=self.canvas.yview)
        self.canvas.configure(yscrollcommand=self.scroll_y.set)
        self.scroll_y.pack(side=tk.RIGHT, fill=tk.Y)
        self.canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)

    def _create_statusbar(self):
        statusbar = ttk.Frame(self, style='TFrame', padding=(5, 2))
        statusbar.pack(side=tk.BOTTOM, fill=tk.X)
        self.info_lbl_left = ttk.Label(statusbar, text="No file open", anchor="w")
        self.info_lbl_left.pack(side=tk.LEFT, padx=10)
        self.info_lbl_right = ttk.Label(statusbar, text="Page: -/- | Zoom: -", anchor="e")
        self.info_lbl_right.pack(side=tk.RIGHT, padx=10)

    def _bind_ui_events(self):
        self.bind("<Control-f>", lambda e: self.search_entry.focus_set())
        self.bind("<Control-plus>", lambda e: self._zoom_in())
        self.bind("<Control-minus>", lambda e: self._zoom_out())
        self.canvas.bind("<MouseWheel>", self._on_mousewheel)
        self.canvas.bind("<Button-4>", self._on_mousewheel)
        self.canvas.bind("<Button-5>", self._on_mousewheel)

    def reset_ui_for_new_pdf(self, page_count):
        self.page_count = page_count
        self.current_page = 0
        self.page_dims.clear()
        self.page_positions.clear()
        self.page_images.clear()
        self.cache.clear()
        self.cache_keys.clear()
        self.canvas.delete("all")
        self.canvas_items = [self.canvas.create_image(0, 0, anchor="nw", image=self.placeholder) for _ in
                             range(self.page_count)]
        self.search_entry.config(state=tk.NORMAL)
        self.clear_search()

    def update_statusbar(self):
        if not self.session:
            self.info_lbl_left.config(text="No file open")
            self.info_lbl_right.config(text="Page: -/- | Zoom: -")
            self.title("PDF Marker")
            return

        filename = self.session.pdf_model.filepath.split('/')[-1].split('\\')[-1]
        self.info_lbl_left.config(text=filename)

        page_info = f"Page: {self.current_page + 1}/{self.page_count}"
        zoom_info = f"Zoom: {self.zoom * 100:.0f}%"
        if self.search_active:
            total = self.session.total_matches
            page_info += f" | Matches: {total}" if total else " | No matches"

        self.info_lbl_right.config(text=f"{page_info} | {zoom_info}")
        self.zoom_label.config(text=f"{self.zoom * 100:.0f}%")
        self.title(f"{filename} - PDF Marker")

    def clear_search(self):
        self.search_active = False
        self.search_entry.delete(0, tk.END)
        self.save_btn.config(state=tk.DISABLED)
        self.update_statusbar()
