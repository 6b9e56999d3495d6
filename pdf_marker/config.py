# config.py

from typing import Dict, Tuple

# --- Rendering / Geometry ---
# Rendering units per document unit used when a file is opened
DEFAULT_SCALE: float = 1.5
MIN_SCALE: float = 0.25
MAX_SCALE: float = 5.0
ZOOM_STEP: float = 1.2

# Fractional digits kept for document-space coordinates
DOCUMENT_PRECISION: int = 2

# --- Highlight Appearance ---
# RGB in 0..1, the way PyMuPDF expects colours
HIGHLIGHT_COLOR: Tuple[float, float, float] = (1.0, 1.0, 0.0)
HIGHLIGHT_OPACITY: float = 0.5

# --- Export ---
EXPORT_FILENAME: str = "marcado.pdf"

# --- Theme Configuration ---
THEMES: Dict[str, Dict[str, str]] = {
    "dark": {
        "bg": "#2E2E2E",
        "fg": "#FFFFFF",
        "canvas_bg": "#3A3A3A",
        "entry_bg": "#3A3A3A",
        "btn_bg": "#4A4A4A",
        "save_bg": "#B03A2E",
    },
}

# --- Application Constants ---
# Limit for how many rendered pages to keep in memory cache
CACHE_SIZE_LIMIT: int = 20

# Number of pages to render immediately above/below the visible viewport
RENDER_BUFFER_PAGES: int = 2

# Seconds to wait for the render thread before its document is released
RENDER_JOIN_TIMEOUT: float = 2.0

# Vertical gap between pages on the canvas, in pixels
PAGE_SPACING: int = 10

LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
