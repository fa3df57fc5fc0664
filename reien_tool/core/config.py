"""設定ファイル（config.json）の読み込み

既定の場所はプロジェクトルートの config.json。ファイルがなくても
デフォルト値で動くので、変えたいキーだけを書けばよい。
"""

import json
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _get_config_path() -> str:
    """既定の config.json の絶対パスを返す。"""
    return os.path.join(_PROJECT_ROOT, 'config.json')


def _default_config() -> dict[str, Any]:
    return {
        'cemetery_name': '',
        'output_dir': './出力',
        'log_level': 'INFO',
        # 御請求書の差出人・振込先
        'office': {
            'name': '霊園 管理事務所',
            'postal_code': '',
            'address': '',
            'phone': '',
            'staff_name': '',
            'bank_lines': [],
        },
        'invoice': {
            'payment_days': 14,
        },
        # 最終更新からの経過日数による契約ステータス
        'status': {
            'attention_days': 365,
            'overdue_days': 730,
        },
        # 合祀堂の収容上限
        'collective_burial': {
            'max_persons_per_application': 10,
            'max_persons_per_plot': 50,
            'max_total_capacity': 500,
            'warning_threshold': 80,
            'critical_threshold': 95,
        },
    }


def _deep_merge(base: dict, override: dict) -> dict:
    """ネストした辞書を再帰的にマージする。override が優先。"""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def load_config(path: str | None = None) -> dict[str, Any]:
    """config.json をデフォルト値に重ねて返す。

    path 省略時はプロジェクトルートの config.json。ファイルがない・
    JSON として読めない・オブジェクトでない場合はデフォルト値のみを返す。
    """
    path = path or _get_config_path()
    defaults = _default_config()
    if not os.path.exists(path):
        return defaults
    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning('設定ファイルを読み込めません（デフォルト値を使用）: %s: %s', path, exc)
        return defaults
    if not isinstance(data, dict):
        logger.warning('設定ファイルの形式が不正です（デフォルト値を使用）: %s', path)
        return defaults
    return _deep_merge(defaults, data)


def get_output_dir(config: dict[str, Any]) -> str:
    """出力フォルダの絶対パスを返す。存在しない場合は作成する。

    相対パスはプロジェクトルート基準。
    """
    raw = config.get('output_dir', './出力')
    path = raw if os.path.isabs(raw) else os.path.normpath(os.path.join(_PROJECT_ROOT, raw))
    os.makedirs(path, exist_ok=True)
    return path
