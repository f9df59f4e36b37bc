"""
PDF 压缩工具

清空文档信息（标题、作者等）并以对象流 + 交叉引用流重新保存，回收冗余对象。
不重新压缩图片，页面内容保持不变。
通过 on_progress 回调报告进度，不直接操作UI。
"""

import logging
import os
from datetime import datetime

from pdfcore import compress as pdf_compress
from pdfcore import document
from pdfcore.errors import PDFToolError


class PDFCompressConverter:
    """PDF压缩转换器，与 UI 完全解耦。

    用法::

        converter = PDFCompressConverter(on_progress=my_callback)
        result = converter.convert("input.pdf")
    """

    def __init__(self, on_progress=None):
        self.on_progress = on_progress or (lambda *a: None)

    def _report(self, percent=-1, progress_text="", status_text=""):
        self.on_progress(percent, progress_text, status_text)

    def convert(self, input_file, output_path=None):
        """压缩PDF文件。

        Args:
            input_file: 输入PDF路径
            output_path: 输出路径，None则自动生成

        Returns:
            dict with keys:
                success (bool), message (str),
                output_file (str), page_count (int),
                original_size (int), compressed_size (int),
                ratio (float)  -- 压缩率百分比
        """
        result = {
            'success': False, 'message': '',
            'output_file': '', 'page_count': 0,
            'original_size': 0, 'compressed_size': 0,
            'ratio': 0.0,
        }

        if not input_file or not os.path.exists(input_file):
            result['message'] = "请先选择PDF文件！"
            return result

        if not output_path:
            dir_path = os.path.dirname(input_file)
            basename = os.path.splitext(os.path.basename(input_file))[0]
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output_path = os.path.join(dir_path, f"{basename}_压缩_{timestamp}.pdf")

        try:
            with open(input_file, 'rb') as f:
                data = f.read()

            self._report(percent=20, progress_text="正在优化文件结构...",
                         status_text="清除元数据、压缩对象")
            compressed = pdf_compress.compress(data)

            with open(output_path, 'wb') as f:
                f.write(compressed.pdf)

            original_size = compressed.original_size
            compressed_size = compressed.compressed_size
            result['original_size'] = original_size
            result['compressed_size'] = compressed_size
            result['ratio'] = compressed.ratio
            result['page_count'] = document.page_count(compressed.pdf)
            result['success'] = True
            result['output_file'] = output_path

            # 如果压缩后反而更大，提示用户
            if compressed_size >= original_size:
                result['message'] = (
                    f"文件已处理，但大小未减小（原始 {self._format_size(original_size)} → "
                    f"{self._format_size(compressed_size)}）。\n"
                    f"该PDF可能已经是最优状态。"
                )
            else:
                result['message'] = (
                    f"压缩完成！\n"
                    f"原始大小：{self._format_size(original_size)}\n"
                    f"压缩后：{self._format_size(compressed_size)}\n"
                    f"减小了 {abs(compressed.ratio):.1f}%"
                    f"（节省 {self._format_size(original_size - compressed_size)}）"
                )

            self._report(percent=100, progress_text="压缩完成！")
            logging.info(
                f"PDF压缩: {self._format_size(original_size)} → "
                f"{self._format_size(compressed_size)} ({compressed.ratio:.1f}%)"
            )

        except PDFToolError as e:
            logging.error(f"PDF压缩失败: {e}")
            result['message'] = f"压缩失败：{e}"
        except Exception as e:
            logging.error(f"PDF压缩失败: {e}", exc_info=True)
            result['message'] = f"压缩失败：{e}"

        return result

    @staticmethod
    def _format_size(size_bytes):
        """格式化文件大小"""
        if size_bytes < 1024:
            return f"{size_bytes} B"
        elif size_bytes < 1024 * 1024:
            return f"{size_bytes / 1024:.1f} KB"
        else:
            return f"{size_bytes / (1024 * 1024):.2f} MB"
