"""
统一的日志处理模块
提供一致的日志接口，支持多种输出方式（控制台、回调函数）
"""
from typing import Optional, Any


class Logger:
    """统一的日志处理器"""

    def __init__(self, log_target: Optional[Any] = None, source_id: Optional[str] = None):
        """
        初始化日志处理器

        Args:
            log_target: 日志输出目标，可以是：
                       - None: 使用 print
                       - Callable: 直接调用该函数 (例如 click.echo)
            source_id: 来源标识符，通常是输入文件名
        """
        self.log_target = log_target
        self.source_id = source_id

    def log(self, message: str, level: str = "INFO"):
        """
        发送日志消息

        Args:
            message: 日志消息内容
            level: 日志级别 (INFO, ERROR, SUCCESS, WARNING)
        """
        formatted_msg = self._format_message(message)

        if self.log_target is None:
            print(formatted_msg)
        elif callable(self.log_target):
            self.log_target(formatted_msg)
        else:
            print(formatted_msg)

    def _format_message(self, message: str) -> str:
        """格式化消息，添加来源前缀"""
        if self.source_id:
            return f"[{self.source_id}] {message}"
        return message

    def info(self, message: str):
        self.log(message, "INFO")

    def error(self, message: str):
        self.log(message, "ERROR")

    def success(self, message: str):
        self.log(message, "SUCCESS")

    def warning(self, message: str):
        self.log(message, "WARNING")


def create_logger(log_target: Optional[Any] = None, source_id: Optional[str] = None) -> Logger:
    """工厂函数：创建日志处理器实例"""
    return Logger(log_target, source_id)
