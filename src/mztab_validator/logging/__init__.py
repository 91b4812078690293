from .logging import get_logger, reset_logger

__all__ = ["get_logger", "reset_logger"]
