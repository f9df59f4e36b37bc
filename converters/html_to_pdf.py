"""
HTML → PDF 转换器

清理 HTML（去除脚本、内嵌框架、事件属性）后渲染为长图，再按页面高度切片成PDF。
通过 on_progress 回调报告进度，不直接操作UI。
"""

import logging
import os
from datetime import datetime

from pdfcore import document, htmlpdf
from pdfcore.errors import ContentTooLarge, PDFToolError
from pdfcore.settings import load_settings


class HTMLToPDFConverter:
    """HTML→PDF 转换器，与 UI 完全解耦。

    用法::

        converter = HTMLToPDFConverter(on_progress=my_callback)
        result = converter.convert("page.html", page_format='letter')
    """

    def __init__(self, on_progress=None, settings=None, dom_to_raster=None):
        """
        Args:
            on_progress: fn(percent, progress_text, status_text)
            dom_to_raster: fn(html, scale) -> PIL.Image，None 使用内置渲染
        """
        self.on_progress = on_progress or (lambda *a: None)
        self.settings = settings or load_settings()
        self.dom_to_raster = dom_to_raster

    def _report(self, percent=-1, progress_text="", status_text=""):
        self.on_progress(percent, progress_text, status_text)

    def convert(self, input_file, output_path=None, page_format='a4',
                orientation='portrait', max_height_per_page=None):
        """
        Returns:
            dict with keys:
                success (bool), message (str),
                output_file (str), page_count (int)
        """
        result = {
            'success': False, 'message': '',
            'output_file': '', 'page_count': 0,
        }

        if not input_file or not os.path.exists(input_file):
            result['message'] = "请先选择HTML文件！"
            return result

        if not output_path:
            dir_path = os.path.dirname(input_file)
            basename = os.path.splitext(os.path.basename(input_file))[0]
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output_path = os.path.join(dir_path, f"{basename}_{timestamp}.pdf")

        try:
            with open(input_file, 'r', encoding='utf-8') as f:
                raw_html = f.read()

            self._report(percent=20, progress_text="正在渲染HTML...",
                         status_text="渲染中...")
            out = htmlpdf.html_to_pdf(
                raw_html,
                page_format=page_format,
                orientation=orientation,
                max_height_per_page=max_height_per_page,
                scale=self.settings['raster_scale'],
                dom_to_raster=self.dom_to_raster,
                max_chars=self.settings['max_html_chars'],
                max_raster_height=self.settings['max_raster_height'],
            )
            with open(output_path, 'wb') as f:
                f.write(out)

            page_count = document.page_count(out)
            self._report(percent=100, progress_text="转换完成！")

            result['success'] = True
            result['output_file'] = output_path
            result['page_count'] = page_count
            result['message'] = f"HTML已转换为 {page_count} 页PDF"

        except ContentTooLarge as e:
            result['message'] = f"内容过大：{e}"
        except (ValueError, PDFToolError) as e:
            logging.error(f"HTML转PDF失败: {e}")
            result['message'] = f"转换失败：{e}"
        except Exception as e:
            logging.error(f"HTML转PDF失败: {e}", exc_info=True)
            result['message'] = f"转换失败：{e}"

        return result
