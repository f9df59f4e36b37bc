"""User settings kept in settings.json in the application directory; missing keys fall back to defaults."""

import json
import os

from pdfcore import get_app_dir

SETTINGS_FILENAME = "settings.json"

DEFAULT_SETTINGS = {
    'watermark_font_size': 48,
    'watermark_opacity': 0.3,
    'watermark_rotation': -45,
    'raster_scale': 2.0,
    'image_format': 'PNG',
    'jpeg_quality': 95,
    'encryption_method': 'aes-256',
    'max_html_chars': 500_000,
    'max_raster_height': 16_000,
    'log_level': 'WARNING',
}


def settings_path():
    return os.path.join(get_app_dir(), SETTINGS_FILENAME)


def load_settings(path=None):
    """Defaults overlaid with the known keys found in the settings file.

    A missing or unreadable file yields the defaults. Values whose type does
    not match the default are ignored.
    """
    settings = dict(DEFAULT_SETTINGS)
    path = path or settings_path()
    if not os.path.exists(path):
        return settings
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError):
        return settings
    if not isinstance(data, dict):
        return settings

    for key, default in DEFAULT_SETTINGS.items():
        value = data.get(key)
        if value is None:
            continue
        if isinstance(default, float) and isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        if type(value) is type(default):
            settings[key] = value
    return settings


def save_settings(settings, path=None):
    path = path or settings_path()
    data = {k: settings[k] for k in DEFAULT_SETTINGS if k in settings}
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
