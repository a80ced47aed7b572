"""日志系统 - 使用 loguru + rich

支持配置模式:
- simple: 简洁模式，只显示关键信息
- detailed: 详细模式，显示调用位置和上下文
- json: JSON 格式，适合日志收集

作为库使用时不会注册全局异常钩子，首次写日志时按配置懒加载。

使用方式:
    from notifyhub.core.logging import get_logger

    logger = get_logger("provider.http")
    logger.info("消息发送成功", provider="telegram", account="main")
"""

import json
import sys
import traceback
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger as loguru_logger
from rich.console import Console
from rich.traceback import install as install_rich_traceback

from notifyhub.core.config import settings


class LogLevel(str, Enum):
    """日志级别"""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogMode(str, Enum):
    """日志模式"""

    SIMPLE = "simple"  # 简洁模式
    DETAILED = "detailed"  # 详细模式
    JSON = "json"  # JSON 模式


# Rich 控制台
console = Console(stderr=True, color_system="auto")

# 这些字段名的值永远不会写入日志
_SECRET_KEYS = frozenset({"secret", "password", "token", "api_secret", "api_key", "key"})

# 内部使用的 extra 字段，不作为上下文输出
_INTERNAL_KEYS = frozenset({"module", "_notifyhub"})


def _safe_for_logging(value: Any, *, _level: int = 0) -> Any:
    """将任意对象转换为可序列化结构，避免 loguru serialize 报错"""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value

    if isinstance(value, dict):
        if _level >= 4:
            return "{...}"
        return {
            str(k): "***" if str(k).lower() in _SECRET_KEYS else _safe_for_logging(v, _level=_level + 1)
            for k, v in value.items()
        }

    if isinstance(value, (list, tuple, set)):
        if _level >= 4:
            return ["..."]
        return [_safe_for_logging(v, _level=_level + 1) for v in value]

    if isinstance(value, Path):
        return str(value)

    if isinstance(value, bytes):
        return f"<{len(value)} bytes>"

    # Pydantic 模型
    if hasattr(value, "model_dump"):
        try:
            return _safe_for_logging(value.model_dump(), _level=_level + 1)
        except (TypeError, ValueError):
            return repr(value)

    # 兜底：字符串化（限制长度避免巨日志）
    text = repr(value)
    if len(text) > 1000:
        return text[:1000] + "..."
    return text


def _escape_markup(text: str) -> str:
    """转义消息中的特殊字符，避免 colorizer 将其误认为格式指令"""
    return text.replace("<", "\\<").replace(">", "\\>").replace("{", "{{").replace("}", "}}")


def format_simple(record: dict) -> str:
    """简洁格式"""
    level = record["level"].name
    extra = record.get("extra", {})
    module = extra.get("module", "notifyhub")

    color_map = {
        "DEBUG": "dim",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold red",
    }
    color = color_map.get(level, "white")

    context_keys = [k for k in extra if k not in _INTERNAL_KEYS]
    context = ""
    if context_keys:
        context = " <dim>" + _escape_markup(" ".join(f"{k}={extra[k]}" for k in context_keys)) + "</dim>"

    return f"<{color}>[{module}]</{color}> {_escape_markup(record['message'])}{context}\n"


def format_detailed(record: dict) -> str:
    """详细格式"""
    level = record["level"].name
    time = record["time"].strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
    extra = record.get("extra", {})
    module = extra.get("module", "notifyhub")

    file_obj = record.get("file")
    file = getattr(file_obj, "name", str(file_obj or ""))
    line = record.get("line", "")
    function = record.get("function", "")

    color_map = {
        "DEBUG": "dim cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold red on white",
    }
    color = color_map.get(level, "white")

    header = f"<dim>{time}</dim> <{color}>{level:8}</{color}>"
    location = f"<cyan>{file}:{line}</cyan> in <blue>{function}</blue>"
    module_tag = f"<magenta>[{module}]</magenta>"

    context_keys = [k for k in extra if k not in _INTERNAL_KEYS]
    context = ""
    if context_keys:
        ctx_parts = [f"{k}={_escape_markup(repr(extra[k]))}" for k in context_keys]
        context = f" <dim>| {', '.join(ctx_parts)}</dim>"

    result = f"{header} {module_tag} {location}{context}\n    → {_escape_markup(record['message'])}\n"

    if record.get("exception"):
        exc_type, exc_value, exc_tb = record["exception"]
        if exc_value:
            tb_str = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
            # loguru 会对返回字符串做 format_map，必须转义大括号
            tb_str = tb_str.replace("{", "{{").replace("}", "}}")
            result += f"\n<red>{tb_str}</red>\n"

    return result


def format_json(record: dict) -> str:
    """JSON 格式"""
    extra = record.get("extra", {})
    file_obj = record.get("file")

    log_entry = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": extra.get("module", "notifyhub"),
        "file": getattr(file_obj, "name", None),
        "line": record.get("line", 0),
        "function": record.get("function", ""),
    }

    for k, v in extra.items():
        if k not in ("file", "line", "function") and k not in _INTERNAL_KEYS:
            try:
                json.dumps(v)
                log_entry[k] = v
            except (TypeError, ValueError):
                log_entry[k] = str(v)

    if record.get("exception"):
        exc_type, exc_value, exc_tb = record["exception"]
        if exc_value:
            log_entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

    # 返回值同样要经过 format_map
    return json.dumps(log_entry, ensure_ascii=False, default=str).replace("{", "{{").replace("}", "}}") + "\n"


class Logger:
    """统一日志接口"""

    def __init__(self) -> None:
        self._configured = False
        self._mode = LogMode.SIMPLE
        self._level = LogLevel.INFO
        self._handler_ids: list[int] = []

    @property
    def mode(self) -> LogMode:
        return self._mode

    @property
    def level(self) -> LogLevel:
        return self._level

    def configure(
        self,
        mode: LogMode | str | None = None,
        level: LogLevel | str | None = None,
        log_file: str | None = None,
    ) -> None:
        """配置日志系统

        Args:
            mode: 日志模式 (simple, detailed, json)
            level: 日志级别 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: 日志文件路径，留空则不记录文件
        """
        if mode is None:
            mode = settings.LOG_MODE
        if level is None:
            level = settings.LOG_LEVEL
        if log_file is None:
            log_file = settings.LOG_FILE

        if isinstance(mode, str):
            mode = LogMode(mode.lower())
        if isinstance(level, str):
            level = LogLevel(level.upper())

        self._mode = mode
        self._level = level

        # 移除 loguru 默认的 stderr 处理器（id 0），否则本库日志会重复输出且不受级别控制
        if not self._configured:
            try:
                loguru_logger.remove(0)
            except ValueError:
                pass

        # 只移除本模块添加的处理器，不影响宿主应用的 loguru 配置
        for handler_id in self._handler_ids:
            try:
                loguru_logger.remove(handler_id)
            except ValueError:
                pass
        self._handler_ids = []

        if mode == LogMode.SIMPLE:
            formatter = format_simple
        elif mode == LogMode.JSON:
            formatter = format_json
        else:
            formatter = format_detailed
            if settings.LOG_RICH_TRACEBACK:
                install_rich_traceback(console=console, show_locals=False, width=120)

        # 只处理本库绑定了 module 的日志
        def _only_notifyhub(record: dict) -> bool:
            return record["extra"].get("_notifyhub", False)

        self._handler_ids.append(
            loguru_logger.add(
                sys.stderr,
                format=formatter,
                level=level.value,
                colorize=mode != LogMode.JSON,
                backtrace=mode == LogMode.DETAILED,
                diagnose=False,
                filter=_only_notifyhub,
            )
        )

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self._handler_ids.append(
                loguru_logger.add(
                    str(log_path),
                    format="{message}",
                    level=level.value,
                    rotation=settings.LOG_FILE_ROTATION,
                    retention=settings.LOG_FILE_RETENTION,
                    compression="gz",
                    serialize=True,
                    filter=_only_notifyhub,
                )
            )

        # 必须在记录日志之前设置，避免递归
        self._configured = True

        self.debug(
            f"日志系统已配置: mode={mode.value}, level={level.value}",
            module="logging",
        )

    def _ensure_configured(self) -> None:
        """确保已配置"""
        if not self._configured:
            self.configure()

    def _log(
        self,
        level: str,
        message: str,
        *,
        module: str = "notifyhub",
        exc_info: bool = False,
        _depth: int = 0,
        **extra: Any,
    ) -> None:
        """内部日志方法"""
        self._ensure_configured()

        context: dict[str, Any] = {"module": module, "_notifyhub": True}
        for k, v in extra.items():
            context[str(k)] = "***" if str(k).lower() in _SECRET_KEYS else _safe_for_logging(v)

        # 调用栈：user -> Logger.info -> _log -> loguru
        # 使用 BoundLogger 时再多一层
        opt_depth = 2 + _depth
        loguru_logger.bind(**context).opt(depth=opt_depth, exception=exc_info).log(
            level.upper(),
            message,
        )

    def debug(self, message: str, *, module: str = "notifyhub", _depth: int = 0, **extra: Any) -> None:
        """调试日志"""
        self._log("debug", message, module=module, _depth=_depth, **extra)

    def info(self, message: str, *, module: str = "notifyhub", _depth: int = 0, **extra: Any) -> None:
        """信息日志"""
        self._log("info", message, module=module, _depth=_depth, **extra)

    def warning(self, message: str, *, module: str = "notifyhub", _depth: int = 0, **extra: Any) -> None:
        """警告日志"""
        self._log("warning", message, module=module, _depth=_depth, **extra)

    def error(
        self,
        message: str,
        *,
        module: str = "notifyhub",
        exc_info: bool = False,
        _depth: int = 0,
        **extra: Any,
    ) -> None:
        """错误日志"""
        self._log("error", message, module=module, exc_info=exc_info, _depth=_depth, **extra)

    def exception(self, message: str, *, module: str = "notifyhub", _depth: int = 0, **extra: Any) -> None:
        """异常日志（自动包含堆栈）"""
        self._log("error", message, module=module, exc_info=True, _depth=_depth, **extra)

    def bind(self, **context: Any) -> "BoundLogger":
        """创建绑定上下文的日志器"""
        return BoundLogger(self, context)


class BoundLogger:
    """绑定上下文的日志器"""

    def __init__(self, parent: Logger, context: dict[str, Any]) -> None:
        self._parent = parent
        self._context = context

    def debug(self, message: str, **extra: Any) -> None:
        self._parent.debug(message, _depth=1, **{**self._context, **extra})

    def info(self, message: str, **extra: Any) -> None:
        self._parent.info(message, _depth=1, **{**self._context, **extra})

    def warning(self, message: str, **extra: Any) -> None:
        self._parent.warning(message, _depth=1, **{**self._context, **extra})

    def error(self, message: str, exc_info: bool = False, **extra: Any) -> None:
        self._parent.error(message, exc_info=exc_info, _depth=1, **{**self._context, **extra})

    def exception(self, message: str, **extra: Any) -> None:
        self._parent.exception(message, _depth=1, **{**self._context, **extra})

    def bind(self, **context: Any) -> "BoundLogger":
        return BoundLogger(self._parent, {**self._context, **context})


# 全局日志实例
logger = Logger()


def get_logger(module: str) -> BoundLogger:
    """获取模块专用日志器

    Args:
        module: 模块名称

    Returns:
        绑定了模块名的日志器

    Example:
        from notifyhub.core.logging import get_logger

        logger = get_logger("provider.dingtalk")
        logger.info("账号已选择", account="ops")
    """
    return logger.bind(module=module)
