"""
PDF 加密/解密工具

加密：设置打开密码和/或权限密码
解密：用正确的打开密码去除保护（默认逐页栅格化重建，也可保留原内容）
通过 on_progress 回调报告进度，不直接操作UI。
"""

import logging
import os
from datetime import datetime

from pdfcore import document, security
from pdfcore.errors import IncorrectPasswordError, NotEncryptedError, PDFToolError
from pdfcore.raster import CancelToken
from pdfcore.settings import load_settings


class PDFEncryptConverter:
    """PDF加密/解密转换器，与 UI 完全解耦。

    用法::

        converter = PDFEncryptConverter(on_progress=my_callback)
        # 加密
        result = converter.encrypt(input_file, user_password="123")
        # 解密
        result = converter.decrypt(input_file, password="123")
    """

    def __init__(self, on_progress=None, settings=None):
        self.on_progress = on_progress or (lambda *a: None)
        self.settings = settings or load_settings()
        self.cancel_token = CancelToken()

    def _report(self, percent=-1, progress_text="", status_text=""):
        self.on_progress(percent, progress_text, status_text)

    def cancel(self):
        """中止正在进行的解密（在两页之间生效），本次运行结束后自动复位。"""
        self.cancel_token.cancel()

    def detect(self, input_file):
        """检测加密状态，返回 'encrypted' / 'not_encrypted' / 'unknown'。"""
        try:
            with open(input_file, 'rb') as f:
                data = f.read()
        except OSError:
            return security.EncryptionState.UNKNOWN.value
        return security.detect_encryption(data).value

    def encrypt(self, input_file, output_path=None,
                user_password="", owner_password="",
                allow_print=True, allow_copy=True,
                allow_modify=False, allow_annotate=True,
                method=None):
        """加密PDF文件。

        Args:
            input_file: 输入PDF路径
            output_path: 输出路径, None则自动生成
            user_password: 打开密码（必填）
            owner_password: 权限密码（控制打印/复制等权限），留空则与打开密码相同
            allow_print: 允许打印
            allow_copy: 允许复制
            allow_modify: 允许修改
            allow_annotate: 允许添加注释
            method: 'aes-256' / 'aes-128' / 'rc4-128'，None 取设置

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

        if not user_password:
            result['message'] = "请设置打开密码！"
            return result

        if not output_path:
            dir_path = os.path.dirname(input_file)
            basename = os.path.splitext(os.path.basename(input_file))[0]
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output_path = os.path.join(dir_path, f"{basename}_加密_{timestamp}.pdf")

        try:
            self._report(percent=20, progress_text="正在打开PDF...",
                         status_text="准备加密...")
            with open(input_file, 'rb') as f:
                data = f.read()
            page_count = document.page_count(data)

            self._report(percent=50, progress_text="正在加密...",
                         status_text="设置密码和权限...")
            perm = security.permissions_mask(
                allow_print=allow_print, allow_copy=allow_copy,
                allow_modify=allow_modify, allow_annotate=allow_annotate,
            )
            out = security.encrypt(
                data, user_password, owner_password or None,
                permissions=perm,
                method=method or self.settings['encryption_method'],
            )
            with open(output_path, 'wb') as f:
                f.write(out)

            self._report(percent=100, progress_text="加密完成！")

            # 构建权限描述
            perms = []
            if allow_print:
                perms.append("打印")
            if allow_copy:
                perms.append("复制")
            if allow_modify:
                perms.append("修改")
            if allow_annotate:
                perms.append("注释")
            perm_text = "、".join(perms) if perms else "无"

            result['success'] = True
            result['output_file'] = output_path
            result['page_count'] = page_count
            result['message'] = (
                f"成功加密 {page_count} 页\n"
                f"权限密码：{'已设置' if owner_password else '与打开密码相同'}\n"
                f"允许：{perm_text}"
            )

        except PDFToolError as e:
            logging.error(f"PDF加密失败: {e}")
            result['message'] = f"加密失败：{e}"
        except Exception as e:
            logging.error(f"PDF加密失败: {e}", exc_info=True)
            result['message'] = f"加密失败：{e}"

        return result

    def decrypt(self, input_file, password="", output_path=None, mode='raster'):
        """解密PDF文件（移除密码保护）。

        Args:
            input_file: 加密的PDF路径
            password: PDF的打开密码
            output_path: 输出路径, None则自动生成
            mode: 'raster' 逐页渲染为图片重建（不保留文字层）；
                  'structural' 直接去除加密字典（保留原内容）

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

        if not password:
            result['message'] = "请输入密码！"
            return result

        if not output_path:
            dir_path = os.path.dirname(input_file)
            basename = os.path.splitext(os.path.basename(input_file))[0]
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output_path = os.path.join(dir_path, f"{basename}_解密_{timestamp}.pdf")

        try:
            self._report(percent=20, progress_text="正在打开PDF...",
                         status_text="正在验证密码...")
            with open(input_file, 'rb') as f:
                data = f.read()

            self._report(percent=40, progress_text="正在移除保护...",
                         status_text="正在重建页面..." if mode == 'raster' else "正在保存...")
            out = security.decrypt(data, password, mode=mode,
                                   scale=self.settings['raster_scale'],
                                   cancel=self.cancel_token)
            with open(output_path, 'wb') as f:
                f.write(out)

            page_count = document.page_count(out)
            self._report(percent=100, progress_text="解密完成！")

            result['success'] = True
            result['output_file'] = output_path
            result['page_count'] = page_count
            result['message'] = f"成功解密 {page_count} 页，已移除密码保护"

        except IncorrectPasswordError:
            result['message'] = "密码错误，请核对后重试！"
        except NotEncryptedError:
            result['message'] = "该PDF未加密，无需解密。"
        except PDFToolError as e:
            logging.error(f"PDF解密失败: {e}")
            result['message'] = f"解密失败：{e}"
        except Exception as e:
            logging.error(f"PDF解密失败: {e}", exc_info=True)
            result['message'] = f"解密失败：{e}"
        finally:
            self.cancel_token.reset()

        return result
