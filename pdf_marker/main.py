# main.py
import logging

from app import PdfMarkerApplication
from config import LOG_FORMAT


def main():
    """Main function to run the PDF Marker application."""
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    app = PdfMarkerApplication()
    app.mainloop()

if __name__ == "__main__":
    main()
