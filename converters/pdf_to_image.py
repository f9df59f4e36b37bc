"""
PDF → 图片 批量转换器

支持多文件批量转换，每个PDF输出到以文件名命名的文件夹。
逐页渲染（同一时间只保留一页的位图），可通过 cancel() 在两页之间中止。
通过 on_progress 回调报告进度，不直接操作UI。
"""

import logging
import os
from datetime import datetime

from pdfcore import document, raster
from pdfcore.errors import OperationCancelled, PDFToolError
from pdfcore.settings import load_settings


class PDFToImageConverter:
    """PDF→图片 批量转换器，与 UI 完全解耦。

    用法::

        converter = PDFToImageConverter(on_progress=my_callback)
        result = converter.convert(files, dpi=144, img_format='PNG')
    """

    def __init__(self, on_progress=None, settings=None):
        """
        Args:
            on_progress: fn(percent, progress_text, status_text)
        """
        self.on_progress = on_progress or (lambda *a: None)
        self.settings = settings or load_settings()
        self.cancel_token = raster.CancelToken()

    def _report(self, percent=-1, progress_text="", status_text=""):
        self.on_progress(percent, progress_text, status_text)

    def cancel(self):
        """中止正在进行的转换（在两页之间生效），本次运行结束后自动复位。"""
        self.cancel_token.cancel()

    def convert(self, files, dpi=None, img_format=None,
                start_page=None, end_page=None):
        """批量转换PDF为图片。

        Args:
            files: PDF文件路径列表
            dpi: 输出DPI (36-1200)，None 取设置中的缩放倍数（默认2倍 = 144 DPI）
            img_format: 'PNG' 或 'JPEG'
            start_page: 起始页（1-based），None=第1页
            end_page: 结束页（1-based），None=最后一页

        Returns:
            dict with keys:
                success (bool), message (str),
                output_dirs (list[str]), page_count (int),
                file_count (int), errors (list[str]),
                dpi (int), format (str)
        """
        if dpi is None:
            dpi = int(self.settings['raster_scale'] * 72)
        img_format = img_format or self.settings['image_format']
        result = {
            'success': False, 'message': '',
            'output_dirs': [], 'page_count': 0,
            'file_count': len(files) if files else 0, 'errors': [],
            'dpi': dpi, 'format': img_format,
        }

        if not files:
            result['message'] = "请先选择PDF文件！"
            return result

        # 校验DPI
        try:
            dpi = int(dpi)
            if dpi < 36 or dpi > 1200:
                raise ValueError
        except (ValueError, TypeError):
            result['message'] = "DPI 必须是 36-1200 之间的整数！"
            return result

        if img_format not in raster.IMAGE_FORMATS:
            img_format = "PNG"
        scale = dpi / 72.0

        processed = 0
        output_dirs = []
        errors = []

        for file_idx, pdf_path in enumerate(files):
            file_label = os.path.basename(pdf_path)
            try:
                with open(pdf_path, 'rb') as f:
                    data = f.read()
                page_count = document.page_count(data)
            except (OSError, PDFToolError) as e:
                errors.append(f"{file_label}: {e}")
                logging.error(f"PDF转图片失败 [{pdf_path}]: {e}")
                continue

            # 确定页范围
            s = max(1, min(start_page or 1, page_count))
            e = max(s, min(end_page or page_count, page_count))
            indices = range(s - 1, e)

            basename = os.path.splitext(file_label)[0]
            output_dir = os.path.join(os.path.dirname(pdf_path), basename)
            if os.path.exists(output_dir):
                timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
                output_dir = os.path.join(os.path.dirname(pdf_path),
                                          f"{basename}_{timestamp}")
            os.makedirs(output_dir, exist_ok=True)
            output_dirs.append(output_dir)

            try:
                for image in raster.pdf_to_images(
                        data, scale=scale, image_format=img_format, indices=indices,
                        cancel=self.cancel_token,
                        jpeg_quality=self.settings['jpeg_quality']):
                    page_num = image.page_index + 1
                    img_path = os.path.join(output_dir, f"{page_num}{image.extension}")
                    with open(img_path, 'wb') as f:
                        f.write(image.data)

                    processed += 1
                    self._report(
                        percent=-1,
                        progress_text=f"[{file_idx + 1}/{len(files)}] {file_label} - 第{page_num}页",
                        status_text=f"正在转换: {file_label}",
                    )
            except OperationCancelled:
                errors.append(f"{file_label}: 已取消")
                break
            except (OSError, PDFToolError) as e:
                errors.append(f"{file_label}: {e}")
                logging.error(f"PDF转图片失败 [{pdf_path}]: {e}")

        result['success'] = processed > 0 and not self.cancel_token.cancelled
        self.cancel_token.reset()
        result['output_dirs'] = output_dirs
        result['page_count'] = processed
        result['errors'] = errors
        result['dpi'] = dpi
        result['format'] = img_format
        result['message'] = f"成功转换 {processed} 页"
        if errors:
            result['message'] += "\n" + "\n".join(errors)
        self._report(percent=100, progress_text="转换完成！")

        return result
