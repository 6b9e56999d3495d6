# app.py
import logging
import sys
import queue
import tkinter as tk
from tkinter import filedialog, messagebox
from PIL import Image, ImageTk

from view import View
from session import MarkerSession
from exporter import ExportError
from renderer import RenderWorker, overlay_highlights
from config import (CACHE_SIZE_LIMIT, EXPORT_FILENAME, MAX_SCALE, MIN_SCALE, PAGE_SPACING,
                    RENDER_JOIN_TIMEOUT, ZOOM_STEP)

logger = logging.getLogger(__name__)


class PdfMarkerApplication(View):
    """
    The main application class for the PDF Marker.
    Acts as the controller, wiring the view to the current MarkerSession.
    """
    def __init__(self):
        super().__init__()

        self.session = None
        self.renderer = None
        self.result_queue = queue.Queue()

        self._bind_app_events()
        self._check_result_queue()

        if len(sys.argv) > 1:
            self.load_pdf(sys.argv[1])

    def _bind_app_events(self):
        self.protocol("WM_DELETE_WINDOW", self._on_closing)
        self.bind("<Control-o>", lambda e: self.open_pdf())

    def _on_closing(self):
        self._teardown_session()
        self.destroy()

    def _teardown_session(self):
        if self.renderer:
            self.renderer.stop()
            self.renderer.join(timeout=RENDER_JOIN_TIMEOUT)
            self.renderer = None
        # Renders still queued for the old document must never reach the new one
        self.result_queue = queue.Queue()
        if self.session:
            self.session.close()
            self.session = None

    def open_pdf(self):
        path = filedialog.askopenfilename(filetypes=[("PDF files", "*.pdf")])
        if path:
            self.load_pdf(path)

    def load_pdf(self, path: str):
        self._teardown_session()
        try:
            self.session = MarkerSession.open(path, scale=self.zoom, on_no_matches=self._report_no_matches)
        except Exception as e:
            logger.exception("Failed to open %s", path)
            messagebox.showerror("Error", f"Failed to open PDF: {e}")
            self.session = None
            self.update_statusbar()
            return

        self.renderer = RenderWorker.from_bytes(self.session.pdf_model.tobytes(), self.result_queue)
        self.reset_ui_for_new_pdf(self.session.pdf_model.page_count)
        self.after(100, self.initial_layout_and_render)

    def initial_layout_and_render(self):
        self._precalculate_layout()
        self.scroll_to_page(0)

    def _precalculate_layout(self):
        if not self.session:
            return
        y_pos = PAGE_SPACING
        canvas_w = self.canvas.winfo_width()
        total_height = y_pos

        self.page_dims.clear()
        self.page_positions.clear()

        for i in range(self.page_count):
            page_rect = self.session.pdf_model.get_page_size(i)
            w, h = int(page_rect.width * self.zoom), int(page_rect.height * self.zoom)
            self.page_dims.append((w, h))
            self.page_positions.append(total_height)

            x_centered = max((canvas_w - w) // 2, 0)
            self.canvas.coords(self.canvas_items[i], x_centered, total_height)
            total_height += h + PAGE_SPACING

        self.canvas.config(scrollregion=(0, 0, max(canvas_w, max((d[0] for d in self.page_dims), default=0)),
                                         total_height))

    def _check_result_queue(self):
        try:
            while not self.result_queue.empty():
                page_index, scale, img = self.result_queue.get_nowait()
                # Drop renders made for a zoom level that is no longer active
                if (self.session and page_index < len(self.canvas_items)
                        and abs(scale - self.zoom) < 0.01):
                    self.page_images[page_index] = img
                    self._place_rendered_image(page_index)
        finally:
            self.after(50, self._check_result_queue)

    def _place_rendered_image(self, page_index):
        img: Image.Image = self.page_images[page_index]
        rects = self.session.results.get(page_index) if self.session else None
        if rects:
            img = overlay_highlights(img, rects)

        tk_img = ImageTk.PhotoImage(img)
        self.cache[page_index] = tk_img
        self.canvas.itemconfig(self.canvas_items[page_index], image=tk_img)

        if page_index in self.cache_keys:
            self.cache_keys.remove(page_index)
        self.cache_keys.append(page_index)

    def _refresh_highlights(self):
        for page_index in list(self.cache_keys):
            if page_index in self.page_images:
                self._place_rendered_image(page_index)

    def request_render_visible_pages(self, force_rerender=False):
        if not self.session or not self.page_positions:
            return
        y0 = self.canvas.canvasy(0)
        y1 = y0 + self.canvas.winfo_height()
        indices_to_render = set()

        for i, y_pos in enumerate(self.page_positions):
            h = self.page_dims[i][1]
            if (y_pos + h) >= y0 and y_pos <= y1:
                indices_to_render.add(i)

        if indices_to_render:
            start = max(0, min(indices_to_render) - self.buffer_pages)
            end = min(self.page_count - 1, max(indices_to_render) + self.buffer_pages)
            indices_to_render.update(range(start, end + 1))

        for i in sorted(indices_to_render):
            if force_rerender or i not in self.cache:
                if self.renderer:
                    self.renderer.render(i, self.zoom)

        self._manage_cache(indices_to_render)
        self._update_current_page_from_scroll()

    def _manage_cache(self, visible_indices: set):
        if len(self.cache) > len(visible_indices) + CACHE_SIZE_LIMIT:
            keys_to_remove = [k for k in self.cache_keys if k not in visible_indices][:CACHE_SIZE_LIMIT]
            for key in keys_to_remove:
                self.cache.pop(key, None)
                self.page_images.pop(key, None)
                self.cache_keys.remove(key)
                self.canvas.itemconfig(self.canvas_items[key], image=self.placeholder)

    def _update_current_page_from_scroll(self):
        y_center = self.canvas.canvasy(0) + self.canvas.winfo_height() / 2
        for i, pos in reversed(list(enumerate(self.page_positions))):
            if y_center >= pos:
                if self.current_page != i:
                    self.current_page = i
                    self.update_statusbar()
                break

    def scroll_to_page(self, page_index: int):
        if not self.session or page_index >= len(self.page_positions):
            return
        parts = str(self.canvas.cget("scrollregion")).split()
        if len(parts) < 4:
            return
        total_height = float(parts[3])

        if total_height > 0:
            self.canvas.yview_moveto(self.page_positions[page_index] / total_height)
        self.request_render_visible_pages()

    def _on_mousewheel(self, event):
        delta = event.delta if event.delta else (120 if event.num == 4 else -120)
        self.canvas.yview_scroll(-1 * (delta // 120), "units")
        self.request_render_visible_pages()

    def _set_zoom(self, zoom: float):
        zoom = min(max(zoom, MIN_SCALE), MAX_SCALE)
        if abs(zoom - self.zoom) < 1e-6:
            return
        self.zoom = zoom
        if not self.session:
            self.update_statusbar()
            return
        # Results are rebuilt at the new scale so exports never use a stale one
        self.session.set_scale(zoom)
        if self.renderer:
            self.renderer.clear()
        self.cache.clear()
        self.cache_keys.clear()
        self.page_images.clear()
        self._precalculate_layout()
        self.request_render_visible_pages(force_rerender=True)
        self.update_statusbar()

    def _zoom_in(self):
        self._set_zoom(self.zoom * ZOOM_STEP)

    def _zoom_out(self):
        self._set_zoom(self.zoom / ZOOM_STEP)

    def _search_event(self, event=None):
        if not self.session:
            return
        term = self.search_entry.get()
        if not term.strip():
            return

        self.session.search(term)
        self.search_active = True
        self.save_btn.config(state=tk.NORMAL if self.session.total_matches else tk.DISABLED)
        self._refresh_highlights()
        self.update_statusbar()

    def _report_no_matches(self, term: str):
        messagebox.showinfo("Search", f"No occurrences found for \"{term}\".")

    def save_pdf_with_highlights(self):
        if not self.session or not self.session.results:
            return
        path = filedialog.asksaveasfilename(defaultextension=".pdf", initialfile=EXPORT_FILENAME,
                                            filetypes=[("PDF files", "*.pdf")])
        if not path:
            return
        try:
            self.session.export(path)
        except ExportError:
            messagebox.showerror("Error", "Error saving PDF. Check the file and try again.")
