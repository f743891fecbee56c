from ..core.error_handler import ErrorHandlerFailureAction
from .logging import LoggingHandler

__all__ = ["LoggingHandler", "ErrorHandlerFailureAction"]
