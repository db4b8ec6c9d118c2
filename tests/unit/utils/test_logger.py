"""
Logger模块的单元测试
"""

import json
import logging
import os
import tempfile
from unittest import TestCase

import pytest


class TestLogger(TestCase):
    """Logger测试类"""

    def setUp(self):
        """测试前准备"""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """测试后清理"""
        import shutil
        for name in ("test_logger", "test_logger_file", "test_logger_json"):
            for handler in logging.getLogger(name).handlers:
                handler.close()
            logging.getLogger(name).handlers = []
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _get_temp_log_path(self) -> str:
        """获取临时日志文件路径"""
        return os.path.join(self.temp_dir, "logs", "test.log")

    # ==================== 基础功能测试 ====================

    def test_logger_init(self):
        """测试Logger初始化"""
        from utils.logger import Logger

        logger = Logger("test_logger")
        self.assertEqual(logger.name, "test_logger")
        self.assertEqual(logger.level, "INFO")
        self.assertFalse(logger.logger.propagate)

    def test_logger_init_invalid_level(self):
        """测试无效日志级别"""
        from utils.logger import Logger, LoggerConfigError

        with self.assertRaises(LoggerConfigError):
            Logger("test_logger", level="VERBOSE")

    def test_add_console_handler(self):
        """测试添加控制台处理器"""
        from utils.logger import Logger

        logger = Logger("test_logger").add_console_handler()
        self.assertEqual(len(logger.logger.handlers), 1)

    def test_reinit_clears_handlers(self):
        """测试重复初始化不重复添加处理器"""
        from utils.logger import Logger

        Logger("test_logger").add_console_handler()
        logger = Logger("test_logger").add_console_handler()
        self.assertEqual(len(logger.logger.handlers), 1)

    def test_set_level(self):
        """测试设置日志级别"""
        from utils.logger import Logger

        logger = Logger("test_logger").add_console_handler()
        logger.set_level("debug")

        self.assertEqual(logger.logger.level, logging.DEBUG)
        self.assertEqual(logger.logger.handlers[0].level, logging.DEBUG)

    # ==================== 文件日志测试 ====================

    def test_file_handler_with_sim_time(self):
        """测试文本日志带仿真时间"""
        from core.dynamic_scheduler.event_loop import EventScheduler
        from utils.logger import Logger

        clock = EventScheduler(start_time=0.25)
        path = self._get_temp_log_path()
        logger = Logger("test_logger_file", event_scheduler=clock).add_file_handler(path)

        logger.log("INFO", "frame dispatched")

        with open(path, encoding="utf-8") as f:
            content = f.read()
        self.assertIn("[t=0.250000s]", content)
        self.assertIn("frame dispatched", content)

    def test_json_file_handler(self):
        """测试结构化日志"""
        from utils.logger import Logger

        path = self._get_temp_log_path()
        logger = Logger("test_logger_json").add_file_handler(path, format="json")

        logger.log("WARNING", {"message": "queue long", "queue_length": 12})

        with open(path, encoding="utf-8") as f:
            record = json.loads(f.readline())
        self.assertEqual(record["message"], "queue long")
        self.assertEqual(record["queue_length"], 12)
        self.assertEqual(record["level"], "WARNING")
        self.assertEqual(record["sim_time"], 0.0)

    def test_invalid_rotation(self):
        """测试无效的轮转策略"""
        from utils.logger import Logger, LoggerConfigError

        with self.assertRaises(LoggerConfigError):
            Logger("test_logger").add_file_handler(self._get_temp_log_path(), rotation="hourly")

    def test_daily_rotation(self):
        """测试按日轮转"""
        from logging.handlers import TimedRotatingFileHandler
        from utils.logger import Logger

        logger = Logger("test_logger").add_file_handler(self._get_temp_log_path(), rotation="daily")
        self.assertIsInstance(logger.logger.handlers[0], TimedRotatingFileHandler)

    def test_child_logger_uses_handlers(self):
        """测试模块logger通过包logger输出"""
        from utils.logger import Logger

        path = self._get_temp_log_path()
        Logger("test_logger_file", level="DEBUG").add_file_handler(path)

        logging.getLogger("test_logger_file.child").debug("from child")

        with open(path, encoding="utf-8") as f:
            self.assertIn("from child", f.read())


def test_log_invalid_level():
    """测试记录日志时级别无效"""
    from utils.logger import Logger, LoggerConfigError

    with pytest.raises(LoggerConfigError):
        Logger("test_logger").log("LOUD", "x")
