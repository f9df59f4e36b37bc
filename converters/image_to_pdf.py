"""
图片 → PDF 转换器

将多张 PNG/JPEG 图片合并为一个PDF，每张图片一页，页面尺寸等于图片像素尺寸。
不支持的文件记入跳过列表，不会中断转换。
通过 on_progress 回调报告进度，不直接操作UI。
"""

import logging
import mimetypes
import os
from datetime import datetime

from pdfcore import transforms
from pdfcore.errors import NoConvertibleImagesError, PDFToolError


def guess_media_type(path):
    media_type, _ = mimetypes.guess_type(path)
    return media_type or 'application/octet-stream'


class ImageToPDFConverter:
    """图片→PDF 转换器，与 UI 完全解耦。

    用法::

        converter = ImageToPDFConverter(on_progress=my_callback)
        result = converter.convert(files)
    """

    def __init__(self, on_progress=None):
        """
        Args:
            on_progress: fn(percent, progress_text, status_text)
        """
        self.on_progress = on_progress or (lambda *a: None)

    def _report(self, percent=-1, progress_text="", status_text=""):
        self.on_progress(percent, progress_text, status_text)

    def convert(self, files, output_path=None, media_types=None):
        """将图片转换为PDF。

        Args:
            files: 图片文件路径列表（按页面顺序）
            output_path: 输出PDF路径，None 则自动生成
            media_types: 可选，与 files 一一对应的媒体类型；None 则按扩展名推断

        Returns:
            dict with keys:
                success (bool), message (str),
                output_file (str), page_count (int),
                skipped (list[str])  -- 被跳过的文件名
        """
        result = {
            'success': False, 'message': '',
            'output_file': '', 'page_count': 0,
            'skipped': [],
        }

        if not files:
            result['message'] = "请先选择图片文件！"
            return result

        if media_types is None:
            media_types = [guess_media_type(f) for f in files]

        if not output_path:
            dir_path = os.path.dirname(files[0])
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output_path = os.path.join(dir_path, f"图片转PDF_{timestamp}.pdf")

        try:
            images = []
            for idx, (img_path, media_type) in enumerate(zip(files, media_types)):
                self._report(
                    percent=int((idx + 1) / len(files) * 80),
                    progress_text=f"正在读取第 {idx + 1}/{len(files)} 张图片",
                    status_text=f"正在处理: {os.path.basename(img_path)}"
                )
                with open(img_path, 'rb') as f:
                    images.append(transforms.ImageInput(
                        name=os.path.basename(img_path),
                        data=f.read(),
                        media_type=media_type,
                    ))

            converted = transforms.images_to_pdf(images)
            for record in converted.skip_records:
                logging.warning(f"跳过 {record.name} ({record.media_type}): {record.reason}")

            with open(output_path, 'wb') as f:
                f.write(converted.pdf)

            self._report(percent=100, progress_text="转换完成！")

            result['success'] = True
            result['output_file'] = output_path
            result['page_count'] = converted.page_count
            result['skipped'] = converted.skipped
            result['message'] = f"成功将 {converted.page_count} 张图片转换为PDF"
            if converted.skipped:
                result['message'] += f"\n已跳过：{'、'.join(converted.skipped)}"

        except NoConvertibleImagesError as e:
            result['skipped'] = e.skipped
            result['message'] = (
                "没有可转换的图片！\n"
                "支持的格式：PNG、JPEG"
            )
        except PDFToolError as e:
            logging.error(f"图片转PDF失败: {e}")
            result['message'] = f"转换失败：{e}"
        except Exception as e:
            logging.error(f"图片转PDF失败: {e}", exc_info=True)
            result['message'] = f"转换失败：{e}"

        return result
