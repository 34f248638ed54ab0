from .error_handler import ErrorHandlingMiddleware, RequestIdMiddleware

__all__ = ["ErrorHandlingMiddleware", "RequestIdMiddleware"]
