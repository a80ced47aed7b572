"""日志系统测试"""

import io
import sys
from pathlib import Path

from notifyhub.core.logging import LogLevel, LogMode, _safe_for_logging, get_logger, logger


class TestSafeForLogging:
    """测试日志值清洗"""

    def test_masks_secret_keys(self):
        assert _safe_for_logging({"secret": "abc", "name": "ops"}) == {"secret": "***", "name": "ops"}

    def test_bytes_summarised(self):
        assert _safe_for_logging(b"12345") == "<5 bytes>"

    def test_path(self):
        assert _safe_for_logging(Path("/tmp/a")) == "/tmp/a"

    def test_depth_limited(self):
        nested = {"a": {"b": {"c": {"d": {"e": {"f": 1}}}}}}
        assert "{...}" in str(_safe_for_logging(nested))


class TestLogger:
    """测试日志器"""

    def test_configure_modes(self, tmp_path):
        log_file = tmp_path / "logs" / "notify.log"
        for mode in ("simple", "detailed", "json"):
            logger.configure(mode=mode, level="DEBUG", log_file=str(log_file))
            assert logger.mode == LogMode(mode)
            get_logger("test").info("配置测试", provider="telegram", secret="hidden")
        assert logger.level == LogLevel.DEBUG
        # 移除处理器后文件句柄关闭
        logger.configure(mode="simple", level="WARNING", log_file="")
        assert log_file.exists()
        assert "hidden" not in log_file.read_text(encoding="utf-8")

    def test_bound_logger_merges_context(self):
        bound = get_logger("test").bind(provider="dingtalk")
        assert bound._context == {"module": "test", "provider": "dingtalk"}

    def test_level_respected_without_duplicates(self, monkeypatch):
        """测试低于配置级别的日志不输出，且每条日志只输出一次"""
        stream = io.StringIO()
        monkeypatch.setattr(sys, "stderr", stream)
        logger.configure(mode="simple", level="WARNING", log_file="")
        log = get_logger("test")

        log.info("info-should-be-hidden")
        log.warning("warn-shown", account="a")

        monkeypatch.undo()
        logger.configure(mode="simple", level="WARNING", log_file="")
        err = stream.getvalue()
        assert "info-should-be-hidden" not in err
        assert err.count("warn-shown") == 1
        assert "account=a" in err
        assert "_notifyhub" not in err
