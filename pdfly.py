"""
Command line entry point for the PDF toolbox.

Examples::

    pdfly merge a.pdf b.pdf -o merged.pdf
    pdfly split in.pdf --pages 1,3,5-7
    pdfly rotate in.pdf --angle 90 --pages 2
    pdfly organize in.pdf --order 3,1,2 --rotate 1:90 --delete 4
    pdfly encrypt in.pdf --user-password secret
    pdfly decrypt in.pdf --password secret
"""

import argparse
import logging
import sys

from pdfcore import __version__, document, transforms
from pdfcore.selection import parse_page_sequence
from pdfcore.settings import load_settings
from converters.html_to_pdf import HTMLToPDFConverter
from converters.image_to_pdf import ImageToPDFConverter
from converters.pdf_compress import PDFCompressConverter
from converters.pdf_encrypt import PDFEncryptConverter
from converters.pdf_merge import PDFMergeConverter
from converters.pdf_reorder import PDFReorderConverter
from converters.pdf_split import PDFSplitConverter
from converters.pdf_to_image import PDFToImageConverter
from converters.pdf_watermark import PDFWatermarkConverter


def _print_progress(percent, progress_text, status_text):
    if progress_text:
        logging.info(f"{percent}% {progress_text}" if percent >= 0 else progress_text)


def _build_parser():
    parser = argparse.ArgumentParser(prog="pdfly", description="Local PDF toolbox")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="show progress")
    parser.add_argument("--settings", help="path to settings.json")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("merge", help="merge PDFs in the given order")
    p.add_argument("files", nargs="+")
    p.add_argument("-o", "--output")

    p = sub.add_parser("split", help="extract or split pages")
    p.add_argument("file")
    p.add_argument("--mode", default="selection",
                   choices=("selection", "every_page", "by_interval", "by_ranges"))
    p.add_argument("--pages", default="", help="1-based selection, e.g. 1,3,5-7")
    p.add_argument("--interval", type=int, default=1)
    p.add_argument("--ranges", help="e.g. 1-3,4-6")
    p.add_argument("-o", "--output", help="output file (selection) or directory")

    p = sub.add_parser("rotate", help="rotate pages")
    p.add_argument("file")
    p.add_argument("--angle", type=int, default=90, choices=(90, 180, 270))
    p.add_argument("--pages", default="", help="1-based pages, default all")
    p.add_argument("-o", "--output")

    p = sub.add_parser("organize", help="reorder, rotate and delete pages")
    p.add_argument("file")
    p.add_argument("--order", default="", help="1-based page order, default unchanged")
    p.add_argument("--rotate", action="append", default=[], metavar="PAGE:DEG",
                   help="rotate original page PAGE by DEG (repeatable)")
    p.add_argument("--delete", action="append", default=[], type=int, metavar="PAGE",
                   help="delete original page PAGE (repeatable)")
    p.add_argument("--reverse", action="store_true")
    p.add_argument("-o", "--output")

    p = sub.add_parser("compress", help="strip metadata and compact")
    p.add_argument("file")
    p.add_argument("-o", "--output")

    p = sub.add_parser("watermark", help="add a text watermark")
    p.add_argument("file")
    p.add_argument("text")
    p.add_argument("--font-size", type=float)
    p.add_argument("--opacity", type=float)
    p.add_argument("--rotation", type=float)
    p.add_argument("-o", "--output")

    p = sub.add_parser("images", help="convert PNG/JPEG images to one PDF")
    p.add_argument("files", nargs="+")
    p.add_argument("-o", "--output")

    p = sub.add_parser("encrypt", help="password-protect a PDF")
    p.add_argument("file")
    p.add_argument("--user-password", required=True)
    p.add_argument("--owner-password", default="")
    p.add_argument("--method", choices=("aes-256", "aes-128", "rc4-128"))
    p.add_argument("--no-print", action="store_true")
    p.add_argument("--no-copy", action="store_true")
    p.add_argument("--allow-modify", action="store_true")
    p.add_argument("--no-annotate", action="store_true")
    p.add_argument("-o", "--output")

    p = sub.add_parser("decrypt", help="remove password protection")
    p.add_argument("file")
    p.add_argument("--password", required=True)
    p.add_argument("--mode", default="raster", choices=("raster", "structural"))
    p.add_argument("-o", "--output")

    p = sub.add_parser("to-images", help="render pages to images")
    p.add_argument("files", nargs="+")
    p.add_argument("--dpi", type=int)
    p.add_argument("--format", choices=("PNG", "JPEG"))
    p.add_argument("--start", type=int)
    p.add_argument("--end", type=int)

    p = sub.add_parser("html", help="convert an HTML file to PDF")
    p.add_argument("file")
    p.add_argument("--format", default="a4", choices=("a4", "letter"))
    p.add_argument("--orientation", default="portrait", choices=("portrait", "landscape"))
    p.add_argument("--max-height", type=float)
    p.add_argument("-o", "--output")

    p = sub.add_parser("info", help="show pages, metadata and encryption state")
    p.add_argument("file")
    p.add_argument("--password")

    return parser


def _organize_entries(args, page_count):
    order = transforms.PageOrder(page_count)
    if args.order:
        sequence = parse_page_sequence(args.order, page_count)
        order.entries = [transforms.PageOrderEntry(i) for i in sequence]
    if args.reverse:
        order.reverse()
    for item in args.rotate:
        page, _, degrees = item.partition(":")
        order.rotate(int(page) - 1, int(degrees or 90))
    for page in args.delete:
        order.delete(page - 1)
    return order


def _run(args, settings):
    on_progress = _print_progress
    cmd = args.command

    if cmd == "merge":
        return PDFMergeConverter(on_progress).convert(args.files, output_path=args.output)
    if cmd == "split":
        converter = PDFSplitConverter(on_progress)
        if args.mode == "selection":
            return converter.convert(args.file, pages_str=args.pages, output_path=args.output)
        return converter.convert(args.file, mode=args.mode, interval=args.interval,
                                 ranges=args.ranges, output_dir=args.output)
    if cmd == "rotate":
        return PDFReorderConverter(on_progress).convert(
            args.file, mode="rotate", rotate_pages=args.pages,
            rotate_angle=args.angle, output_path=args.output)
    if cmd == "organize":
        with open(args.file, "rb") as f:
            page_count = document.page_count(f.read())
        order = _organize_entries(args, page_count)
        return PDFReorderConverter(on_progress).convert(
            args.file, mode="organize", entries=order, output_path=args.output)
    if cmd == "compress":
        return PDFCompressConverter(on_progress).convert(args.file, output_path=args.output)
    if cmd == "watermark":
        return PDFWatermarkConverter(on_progress, settings).convert(
            args.file, args.text, output_path=args.output, font_size=args.font_size,
            opacity=args.opacity, rotation=args.rotation)
    if cmd == "images":
        return ImageToPDFConverter(on_progress).convert(args.files, output_path=args.output)
    if cmd == "encrypt":
        return PDFEncryptConverter(on_progress, settings).encrypt(
            args.file, output_path=args.output,
            user_password=args.user_password, owner_password=args.owner_password,
            allow_print=not args.no_print, allow_copy=not args.no_copy,
            allow_modify=args.allow_modify, allow_annotate=not args.no_annotate,
            method=args.method)
    if cmd == "decrypt":
        return PDFEncryptConverter(on_progress, settings).decrypt(
            args.file, password=args.password, output_path=args.output, mode=args.mode)
    if cmd == "to-images":
        return PDFToImageConverter(on_progress, settings).convert(
            args.files, dpi=args.dpi, img_format=args.format,
            start_page=args.start, end_page=args.end)
    if cmd == "html":
        return HTMLToPDFConverter(on_progress, settings).convert(
            args.file, output_path=args.output, page_format=args.format,
            orientation=args.orientation, max_height_per_page=args.max_height)
    raise ValueError(f"Unknown command: {cmd}")


def _show_info(args):
    with open(args.file, "rb") as f:
        info = document.inspect(f.read(), password=args.password)
    print(f"Pages: {info.page_count}")
    print(f"Encrypted: {'yes' if info.encrypted else 'no'}")
    for key, value in info.metadata.items():
        if value:
            print(f"{key.capitalize()}: {value}")
    for page in info.pages:
        print(f"  page {page.index + 1}: {page.width:.1f} x {page.height:.1f} pt, "
              f"rotation {page.rotation}")


def main(argv=None):
    """Parse arguments, run one command and return the exit status."""
    args = _build_parser().parse_args(argv)
    settings = load_settings(args.settings)
    level = logging.INFO if args.verbose else getattr(logging, settings['log_level'], logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        if args.command == "info":
            _show_info(args)
            return 0
        result = _run(args, settings)
    except Exception as e:
        logging.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    stream = sys.stdout if result.get('success') else sys.stderr
    print(result.get('message', ''), file=stream)
    return 0 if result.get('success') else 1


if __name__ == "__main__":
    sys.exit(main())
