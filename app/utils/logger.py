import json
import sys
from datetime import datetime
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"


class Colors:
    """ANSI color codes for console output"""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

    BRIGHT_BLACK = '\033[90m'
    BRIGHT_RED = '\033[91m'
    BRIGHT_GREEN = '\033[92m'
    BRIGHT_YELLOW = '\033[93m'
    BRIGHT_BLUE = '\033[94m'
    BRIGHT_CYAN = '\033[96m'
    WHITE = '\033[37m'


class CoachlyLogger:
    """Service logger with colorized output and key=value context.

    Business events (task submitted, recommendation generated, ...) go
    through these instances; infrastructure code uses the standard
    ``logging`` module.
    """

    LEVEL_COLORS = {
        LogLevel.DEBUG: Colors.BRIGHT_CYAN,
        LogLevel.INFO: Colors.BRIGHT_BLUE,
        LogLevel.WARNING: Colors.BRIGHT_YELLOW,
        LogLevel.ERROR: Colors.BRIGHT_RED,
        LogLevel.SUCCESS: Colors.BRIGHT_GREEN,
    }

    def __init__(self, service_name: str = "COACHLY", enable_colors: bool = True):
        self.service_name = service_name.upper()
        self.enable_colors = enable_colors

    def _colorize(self, text: str, color: str) -> str:
        if not self.enable_colors:
            return text
        return f"{color}{text}{Colors.RESET}"

    def _format_message(self, level: LogLevel, message: str, context: Optional[str] = None) -> str:
        """Format: [TIMESTAMP] [SERVICE/CONTEXT] [LEVEL] Message"""
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        service_context = self.service_name
        if context:
            service_context += f"/{context.upper()}"

        level_text = self._colorize(f"[{level.value}]", self.LEVEL_COLORS.get(level, Colors.WHITE) + Colors.BOLD)
        service_text = self._colorize(f"[{service_context}]", Colors.BRIGHT_BLACK)
        timestamp_text = self._colorize(f"[{timestamp}]", Colors.DIM)
        return f"{timestamp_text} {service_text} {level_text} {message}"

    @staticmethod
    def _format_value(value) -> str:
        if isinstance(value, (dict, list)):
            value_str = json.dumps(value, default=str, separators=(',', ':'))
            if len(value_str) > 100:
                value_str = value_str[:100] + "..."
            return value_str
        return str(value)

    def _log(self, level: LogLevel, message: str, context: Optional[str] = None, **kwargs):
        formatted_message = self._format_message(level, message, context)

        if kwargs:
            extras = ", ".join(f"{key}={self._format_value(value)}" for key, value in kwargs.items())
            formatted_message += self._colorize(f" | {extras}", Colors.DIM)

        print(formatted_message, file=sys.stdout)
        sys.stdout.flush()

    def debug(self, message: str, context: Optional[str] = None, **kwargs):
        self._log(LogLevel.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[str] = None, **kwargs):
        self._log(LogLevel.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[str] = None, **kwargs):
        self._log(LogLevel.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[str] = None, **kwargs):
        self._log(LogLevel.ERROR, message, context, **kwargs)

    def success(self, message: str, context: Optional[str] = None, **kwargs):
        self._log(LogLevel.SUCCESS, message, context, **kwargs)


# Global logger instances for different services
task_logger = CoachlyLogger("TASK")
template_logger = CoachlyLogger("TEMPLATE")
recommendation_logger = CoachlyLogger("RECOMMENDATION")
api_logger = CoachlyLogger("API")


def get_logger(service_name: str) -> CoachlyLogger:
    """Get a logger instance for a specific service"""
    return CoachlyLogger(service_name)
