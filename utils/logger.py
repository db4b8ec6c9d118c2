"""
日志管理模块

功能：
- 支持控制台日志和文件日志（可按日期轮转）
- 支持文本格式和结构化日志（JSON格式）
- 日志记录附带仿真虚拟时间（sim_time）
"""

import json
import logging
import sys
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

from core.dynamic_scheduler.event_loop import EventScheduler


class LoggerConfigError(Exception):
    """日志配置错误"""
    pass


class SimTimeFilter(logging.Filter):
    """为日志记录添加仿真虚拟时间字段 sim_time（秒）"""

    def __init__(self, event_scheduler: Optional[EventScheduler] = None):
        super().__init__()
        self.event_scheduler = event_scheduler

    def filter(self, record: logging.LogRecord) -> bool:
        record.sim_time = self.event_scheduler.now if self.event_scheduler else 0.0
        return True


class JsonFormatter(logging.Formatter):
    """JSON格式日志格式化器"""

    def format(self, record: logging.LogRecord) -> str:
        """格式化日志记录为JSON"""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "sim_time": getattr(record, "sim_time", None),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage()
        }

        # 添加额外字段
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """文本格式日志格式化器"""

    DEFAULT_FORMAT = "%(asctime)s - [t=%(sim_time).6fs] %(name)s - %(levelname)s - %(message)s"

    def __init__(self, fmt: Optional[str] = None):
        super().__init__(fmt=fmt or self.DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "sim_time"):
            record.sim_time = 0.0
        return super().format(record)


class Logger:
    """
    日志管理器

    包装标准库logger（通常是包的根logger，如 ``scheduler``），
    统一添加处理器和仿真时间字段。

    Example:
        >>> log = Logger("scheduler", level="DEBUG", event_scheduler=clock)
        >>> log.add_console_handler().add_file_handler("logs/fwd.log", format="json")
    """

    LEVEL_MAP = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL
    }

    def __init__(
        self,
        name: str,
        level: str = "INFO",
        event_scheduler: Optional[EventScheduler] = None
    ):
        """
        初始化日志管理器

        Args:
            name: Logger名称
            level: 日志级别 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            event_scheduler: 提供仿真时间的事件调度器

        Raises:
            LoggerConfigError: 无效的日志级别
        """
        level = level.upper()
        if level not in self.LEVEL_MAP:
            raise LoggerConfigError(f"无效的日志级别: {level}. 有效值: {list(self.LEVEL_MAP.keys())}")

        self.name = name
        self.level = level
        self.sim_time_filter = SimTimeFilter(event_scheduler)
        self._logger = logging.getLogger(name)
        self._logger.setLevel(self.LEVEL_MAP[level])

        # 清除已有处理器（避免重复输出）
        self._logger.handlers = []
        self._logger.propagate = False

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _add_handler(self, handler: logging.Handler, format: str) -> "Logger":
        handler.setLevel(self.LEVEL_MAP[self.level])
        handler.addFilter(self.sim_time_filter)
        handler.setFormatter(JsonFormatter() if format == "json" else TextFormatter())
        self._logger.addHandler(handler)
        return self

    def add_console_handler(self, format: str = "text") -> "Logger":
        """
        添加控制台处理器（stderr，不干扰命令行结果输出）

        Args:
            format: 格式类型 ("text", "json")

        Returns:
            Logger: 自身，支持链式调用
        """
        return self._add_handler(logging.StreamHandler(sys.stderr), format)

    def add_file_handler(
        self,
        path: str,
        rotation: str = "none",
        format: str = "text",
        backup_count: int = 7
    ) -> "Logger":
        """
        添加文件处理器

        Args:
            path: 日志文件路径
            rotation: 轮转策略 ("none", "daily")
            format: 格式类型 ("text", "json")
            backup_count: 保留的备份文件数量

        Returns:
            Logger: 自身，支持链式调用

        Raises:
            LoggerConfigError: 无效的轮转策略
        """
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        if rotation == "daily":
            handler = TimedRotatingFileHandler(
                path, when="midnight", interval=1, backupCount=backup_count, encoding="utf-8"
            )
        elif rotation == "none":
            handler = logging.FileHandler(path, encoding="utf-8")
        else:
            raise LoggerConfigError(f"无效的轮转策略: {rotation}")

        return self._add_handler(handler, format)

    def set_event_scheduler(self, event_scheduler: Optional[EventScheduler]) -> None:
        """更换提供仿真时间的事件调度器"""
        self.sim_time_filter.event_scheduler = event_scheduler

    def log(self, level: str, message: Union[str, Dict[str, Any]]) -> None:
        """
        记录日志

        Args:
            level: 日志级别
            message: 日志消息（字符串，或带message键的结构化字典）
        """
        levelno = self.LEVEL_MAP.get(level.upper())
        if levelno is None:
            raise LoggerConfigError(f"无效的日志级别: {level}")

        if isinstance(message, dict):
            self._logger.log(levelno, message.get("message", ""), extra={"extra_data": message})
        else:
            self._logger.log(levelno, message)

    def set_level(self, level: str) -> None:
        """
        设置日志级别

        Args:
            level: 日志级别
        """
        level = level.upper()
        if level not in self.LEVEL_MAP:
            raise LoggerConfigError(f"无效的日志级别: {level}")

        self.level = level
        self._logger.setLevel(self.LEVEL_MAP[level])
        for handler in self._logger.handlers:
            handler.setLevel(self.LEVEL_MAP[level])
