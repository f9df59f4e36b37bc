"""
PDF page reorder / rotate / reverse / organize utility.

Supported modes:
- reorder: rebuild pages from a page sequence (e.g. "3,1,2,4-6")
- rotate: rotate selected pages by 90/180/270 degrees
- reverse: reverse all pages
- organize: apply a list of page order entries (reorder + rotate + delete)
"""

import logging
import os
from datetime import datetime

from pdfcore import document, selection, transforms
from pdfcore.errors import PDFToolError


class PDFReorderConverter:
    """PDF page reorder / rotate / reverse converter (UI-decoupled)."""

    def __init__(self, on_progress=None):
        self.on_progress = on_progress or (lambda *a: None)

    def _report(self, percent=-1, progress_text="", status_text=""):
        self.on_progress(percent, progress_text, status_text)

    def convert(
        self,
        input_file,
        mode="reorder",
        reorder_pages="",
        rotate_pages="",
        rotate_angle=90,
        entries=None,
        output_path=None,
    ):
        result = {
            "success": False,
            "message": "",
            "output_file": "",
            "page_count": 0,
        }

        if not input_file or not os.path.exists(input_file):
            result["message"] = f"Input file not found: {input_file}"
            return result

        try:
            with open(input_file, "rb") as f:
                data = f.read()
            total_pages = document.page_count(data)
        except (OSError, PDFToolError) as e:
            result["message"] = f"Failed to open PDF: {e}"
            return result

        if not output_path:
            dirname = os.path.dirname(input_file)
            basename = os.path.splitext(os.path.basename(input_file))[0]
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            suffix = {
                "reorder": "reordered",
                "rotate": "rotated",
                "reverse": "reversed",
                "organize": "organized",
            }.get(mode, "pages")
            output_path = os.path.join(dirname, f"{basename}_{suffix}_{ts}.pdf")

        try:
            if mode == "reorder":
                if not reorder_pages or not reorder_pages.strip():
                    result["message"] = "Please enter the page order, e.g. 3,1,2,4-6"
                    return result
                seq = selection.parse_page_sequence(reorder_pages, total_pages)
                self._report(10, "Reordering pages...", "Reordering pages")
                entries = [transforms.PageOrderEntry(i) for i in seq]
                out = transforms.organize(data, entries)
                result["message"] = "Page reorder completed"

            elif mode == "rotate":
                angle = int(rotate_angle)
                pages = selection.parse_page_selection(rotate_pages, total_pages)
                self._report(10, "Rotating pages...", "Rotating pages")
                out = transforms.rotate(data, angle, pages or None)
                result["message"] = "Page rotation completed"

            elif mode == "reverse":
                self._report(10, "Reversing pages...", "Reversing pages")
                out = transforms.reverse(data)
                result["message"] = "Page reverse completed"

            elif mode == "organize":
                if isinstance(entries, transforms.PageOrder):
                    entries = entries.active_entries()
                if not entries:
                    result["message"] = "No page order given"
                    return result
                self._report(10, "Organizing pages...", "Organizing pages")
                out = transforms.organize(data, entries)
                result["message"] = "Page organize completed"

            else:
                result["message"] = f"Unsupported mode: {mode}"
                return result

            self._report(90, "Saving...", "Saving")
            with open(output_path, "wb") as f:
                f.write(out)

            result["success"] = True
            result["output_file"] = output_path
            result["page_count"] = document.page_count(out)
            self._report(100, "PDF page processing completed")
            return result

        except (ValueError, PDFToolError) as e:
            logging.error(f"PDF page process failed: {e}")
            result["message"] = f"Page process failed: {e}"
            return result
        except Exception as e:
            logging.error(f"PDF page process failed: {e}", exc_info=True)
            result["message"] = f"Page process failed: {e}"
            return result
