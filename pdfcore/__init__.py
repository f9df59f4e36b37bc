"""PDF engine: document model adapter, page transforms, watermark, encryption, compression, rasterization.

Every operation takes bytes and returns bytes. Failures raise the exceptions in pdfcore.errors; nothing here logs.
"""

__version__ = "1.0.0"

import sys
import os


def get_app_dir():
    """Application directory, PyInstaller-aware."""
    if getattr(sys, 'frozen', False):
        return os.path.dirname(sys.executable)
    # project root is the parent of pdfcore/
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
