"""PDF工具模块：每种工具一个文件，读写文件并调用 pdfcore 引擎。

包含：
- pdf_merge: PDF 合并
- pdf_split: PDF 拆分 / 提取所选页
- pdf_reorder: 页面重排 / 旋转 / 倒序 / 整理
- pdf_compress: PDF 压缩（清除元数据 + 对象流）
- pdf_watermark: PDF 加文字水印
- pdf_encrypt: PDF 加密/解密
- image_to_pdf: 图片 → PDF
- pdf_to_image: PDF → 图片（批量）
- html_to_pdf: HTML → PDF
"""
