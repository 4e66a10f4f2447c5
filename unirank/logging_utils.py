"""
日志工具封装。

基于标准库 logging：stderr 输出 "[LEVEL] message"，可选再写一份 JSON 行日志。
库内模块统一用 logging.getLogger(__name__)，作为 "unirank" 的子 logger。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional


class JsonLineFormatter(logging.Formatter):
    """每条记录输出一行 JSON；消息经 json.dumps 转义，含引号或换行也不会破坏格式。"""

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logger(
    name: str = "unirank",
    level: str = "INFO",
    log_to_stderr: bool = True,
    json_log_path: Optional[Path] = None,
) -> logging.Logger:
    """
    初始化并返回一个 logger。

    - 默认输出到 stderr，格式为 "[LEVEL] message"（重复调用不会叠加 handler）
    - 如提供 json_log_path，则额外写入 JSON 行日志（同一路径只挂一个 handler）
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    has_stream = any(type(h) is logging.StreamHandler for h in logger.handlers)
    if log_to_stderr and not has_stream:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(stream_handler)

    if json_log_path is not None:
        target = str(json_log_path.resolve())
        attached = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target for h in logger.handlers
        )
        if not attached:
            json_log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(json_log_path, encoding="utf-8")
            file_handler.setFormatter(JsonLineFormatter())
            logger.addHandler(file_handler)

    return logger


def setup_logger_from_config(cfg: dict) -> logging.Logger:
    """按 config.yaml 中的 log_level / log_json_path 初始化根 logger "unirank"。"""
    json_path = str(cfg.get("log_json_path") or "").strip()
    return setup_logger(
        level=str(cfg.get("log_level") or "INFO"),
        json_log_path=Path(json_path) if json_path else None,
    )


__all__ = ["JsonLineFormatter", "setup_logger", "setup_logger_from_config"]
