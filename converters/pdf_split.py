"""
PDF 拆分/提取工具

支持四种模式：提取所选页（一个PDF）、每页一个PDF、按固定间隔拆分、按自定义范围拆分。
通过 on_progress 回调报告进度，不直接操作UI。
"""

import logging
import os
from datetime import datetime

from pdfcore import document, selection, transforms
from pdfcore.errors import PDFToolError

SPLIT_MODES = ('selection', 'every_page', 'by_interval', 'by_ranges')


class PDFSplitConverter:
    """PDF拆分转换器，与 UI 完全解耦。

    用法::

        converter = PDFSplitConverter(on_progress=my_callback)
        result = converter.convert(input_file, mode='selection', pages_str='3,1,5-6')
    """

    def __init__(self, on_progress=None):
        """
        Args:
            on_progress: fn(percent, progress_text, status_text)
        """
        self.on_progress = on_progress or (lambda *a: None)

    def _report(self, percent=-1, progress_text="", status_text=""):
        self.on_progress(percent, progress_text, status_text)

    def convert(self, input_file, mode='selection', pages_str="", interval=1,
                ranges=None, output_dir=None, output_path=None):
        """拆分PDF文件。

        Args:
            input_file: 输入PDF路径
            mode: 拆分模式
                - 'selection': 提取所选页为一个PDF（页码升序，与选择顺序无关）
                - 'every_page': 每页一个PDF
                - 'by_interval': 每N页一个PDF
                - 'by_ranges': 按自定义范围拆分（如 "1-3,4-6,7-10"）
            pages_str: 所选页码（mode='selection'时使用，如 "1,3,5-7"）
            interval: 每N页拆分（mode='by_interval'时使用）
            ranges: 自定义范围字符串（mode='by_ranges'时使用）
            output_dir: 输出目录，None则自动生成
            output_path: 输出文件（mode='selection'时使用），None则自动生成

        Returns:
            dict with keys:
                success (bool), message (str),
                output_dir (str), output_files (list[str]),
                page_count (int), file_count (int)
        """
        result = {
            'success': False, 'message': '',
            'output_dir': '', 'output_files': [],
            'page_count': 0, 'file_count': 0,
        }

        if not input_file:
            result['message'] = "请先选择PDF文件！"
            return result

        if mode not in SPLIT_MODES:
            result['message'] = f"不支持的拆分模式：{mode}"
            return result

        try:
            with open(input_file, 'rb') as f:
                data = f.read()
            total_pages = document.page_count(data)
        except (OSError, PDFToolError) as e:
            result['message'] = f"无法打开PDF文件：{e}"
            return result

        result['page_count'] = total_pages
        basename = os.path.splitext(os.path.basename(input_file))[0]

        # 确定分组
        try:
            if mode == 'selection':
                groups = [selection.parse_page_selection(pages_str, total_pages)]
            elif mode == 'every_page':
                groups = [[i] for i in range(total_pages)]
            elif mode == 'by_interval':
                groups = selection.interval_groups(total_pages, interval)
            else:
                groups = selection.parse_page_groups(ranges, total_pages)
        except ValueError as e:
            result['message'] = str(e)
            return result

        if mode == 'selection':
            return self._extract(data, groups[0], input_file, basename,
                                 output_path, result)

        # 准备输出目录
        if not output_dir:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output_dir = os.path.join(
                os.path.dirname(input_file),
                f"{basename}_拆分_{timestamp}"
            )
        os.makedirs(output_dir, exist_ok=True)
        result['output_dir'] = output_dir

        # 执行拆分
        output_files = []
        for group_idx, pages in enumerate(groups):
            self._report(
                percent=int((group_idx + 1) / len(groups) * 100),
                progress_text=f"正在拆分第 {group_idx + 1}/{len(groups)} 个部分",
                status_text="拆分中..."
            )

            try:
                part = transforms.extract_pages(data, pages)

                # 以页范围命名
                if len(pages) == 1:
                    out_name = f"{basename}_第{pages[0] + 1}页.pdf"
                else:
                    out_name = f"{basename}_第{pages[0] + 1}-{pages[-1] + 1}页.pdf"

                out_path = os.path.join(output_dir, out_name)
                with open(out_path, 'wb') as f:
                    f.write(part)
                output_files.append(out_path)
            except (OSError, PDFToolError) as e:
                logging.error(f"拆分第{group_idx + 1}部分失败: {e}")
                result['message'] = f"拆分第{group_idx + 1}部分时出错：{e}"
                return result

        result['success'] = True
        result['output_files'] = output_files
        result['file_count'] = len(output_files)
        result['message'] = f"成功拆分为 {len(output_files)} 个文件"

        self._report(percent=100, progress_text="拆分完成！")
        return result

    def _extract(self, data, pages, input_file, basename, output_path, result):
        """所选页（已升序）提取为一个PDF。"""
        if not output_path:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output_path = os.path.join(os.path.dirname(input_file),
                                       f"{basename}_提取_{timestamp}.pdf")
        self._report(percent=30, progress_text=f"正在提取 {len(pages)} 页",
                     status_text="提取中...")
        try:
            extracted = transforms.extract_pages(data, pages)
            with open(output_path, 'wb') as f:
                f.write(extracted)
        except (OSError, PDFToolError) as e:
            logging.error(f"提取页面失败: {e}")
            result['message'] = f"提取失败：{e}"
            return result

        self._report(percent=100, progress_text="提取完成！")
        result['success'] = True
        result['output_dir'] = os.path.dirname(output_path)
        result['output_files'] = [output_path]
        result['file_count'] = 1
        result['message'] = f"成功提取 {len(pages)} 页"
        return result
