# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class ErrorInfo(NamedTuple):
    code: str
    message: str
    http_status: int


class ErrorMessage(Enum):
    INVALID_REQUEST = ErrorInfo(
        "invalid_request", "query (string) is required", status.HTTP_400_BAD_REQUEST
    )
    UPSTREAM_UNAVAILABLE = ErrorInfo(
        "upstream_unavailable",
        "Language model service is unavailable",
        status.HTTP_502_BAD_GATEWAY,
    )
    INTERNAL_ERROR = ErrorInfo(
        "internal_error", "Internal Error", status.HTTP_500_INTERNAL_SERVER_ERROR
    )
