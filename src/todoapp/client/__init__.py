"""Python client for the todo platform."""

from src.todoapp.client.api import ApiError, AuthApi, TodoApi
from src.todoapp.client.reporter import ErrorReportHandler, install_error_reporter
from src.todoapp.client.session import ClientSession

__all__ = [
    "ApiError",
    "AuthApi",
    "TodoApi",
    "ClientSession",
    "ErrorReportHandler",
    "install_error_reporter",
]
