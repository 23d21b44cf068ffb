"""ロギング設定。

ルートロガーにコンソールハンドラ（と任意でファイルハンドラ）を1回だけ付ける。
書式・日時書式は Settings（LOG_FORMAT / LOG_DATEFMT）から渡される。
"""

import logging
from pathlib import Path

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: str) -> int:
    """ログレベル名を数値に変換する。不明な名前は INFO。"""
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def setup_logging(
    level: str = "INFO",
    logfile: str | None = None,
    fmt: str = DEFAULT_LOG_FORMAT,
    datefmt: str = DEFAULT_DATE_FORMAT,
) -> None:
    """ルートロガーを設定する。ハンドラ設定済みなら何もしない。

    Args:
        level: ログレベル名（大文字小文字は問わない）
        logfile: 出力先ファイル。親ディレクトリは必要なら作成する
        fmt: ログ書式（% 形式）
        datefmt: asctime の書式

    Raises:
        ValueError: fmt が % 形式の書式として不正な場合
    """
    root = logging.getLogger()
    if root.handlers:
        return

    # 不正な書式はハンドラを付ける前に弾く
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt, validate=True)
    root.setLevel(resolve_level(level))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if logfile:
        path = Path(logfile).resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
