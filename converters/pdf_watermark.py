"""
PDF 加水印工具

在每一页中央添加同样的半透明旋转文字水印。
通过 on_progress 回调报告进度，不直接操作UI。
"""

import logging
import os
from datetime import datetime

from pdfcore import document, watermark
from pdfcore.errors import PDFToolError
from pdfcore.settings import load_settings


class PDFWatermarkConverter:
    """PDF加水印转换器，与 UI 完全解耦。

    用法::

        converter = PDFWatermarkConverter(on_progress=my_callback)
        result = converter.convert(input_file, watermark_text="CONFIDENTIAL")
    """

    def __init__(self, on_progress=None, settings=None):
        self.on_progress = on_progress or (lambda *a: None)
        self.settings = settings or load_settings()

    def _report(self, percent=-1, progress_text="", status_text=""):
        self.on_progress(percent, progress_text, status_text)

    def convert(self, input_file, watermark_text, output_path=None,
                font_size=None, opacity=None, rotation=None):
        """给PDF添加文字水印。

        Args:
            input_file: 输入PDF路径
            watermark_text: 水印文字
            output_path: 输出路径，None则自动生成
            font_size: 字号，None 取设置中的默认值（48）
            opacity: 透明度 (0.0-1.0)，None 取默认值（0.3）
            rotation: 旋转角度（逆时针为正），None 取默认值（-45）

        Returns:
            dict with keys:
                success (bool), message (str),
                output_file (str), page_count (int)
        """
        result = {
            'success': False, 'message': '',
            'output_file': '', 'page_count': 0,
        }

        if not input_file:
            result['message'] = "请先选择PDF文件！"
            return result

        if not watermark_text or not watermark_text.strip():
            result['message'] = "请输入水印文字！"
            return result

        if font_size is None:
            font_size = self.settings['watermark_font_size']
        if opacity is None:
            opacity = self.settings['watermark_opacity']
        if rotation is None:
            rotation = self.settings['watermark_rotation']

        if not output_path:
            dir_path = os.path.dirname(input_file)
            basename = os.path.splitext(os.path.basename(input_file))[0]
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output_path = os.path.join(dir_path, f"{basename}_水印_{timestamp}.pdf")

        try:
            with open(input_file, 'rb') as f:
                data = f.read()

            self._report(percent=20, progress_text="正在添加水印...",
                         status_text=f"字号 {font_size}，透明度 {opacity}")
            out = watermark.add_watermark(data, watermark_text, font_size=font_size,
                                          opacity=opacity, rotation=rotation)
            with open(output_path, 'wb') as f:
                f.write(out)

            page_count = document.page_count(out)
            self._report(percent=100, progress_text="水印添加完成！")

            result['success'] = True
            result['output_file'] = output_path
            result['page_count'] = page_count
            result['message'] = f"成功为 {page_count} 页添加水印"

        except (ValueError, PDFToolError) as e:
            logging.error(f"PDF加水印失败: {e}")
            result['message'] = f"加水印失败：{e}"
        except Exception as e:
            logging.error(f"PDF加水印失败: {e}", exc_info=True)
            result['message'] = f"加水印失败：{e}"

        return result
