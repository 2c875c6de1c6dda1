# util/errors.py
from fastapi import HTTPException, status
from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self,
        message: str,
        http_status: int = status.HTTP_400_BAD_REQUEST,
        code: str = "error",
    ) -> None:
        super().__init__(status_code=http_status, detail=message)
        self.code = code

    @classmethod
    def of(cls, error: ErrorMessage, message: str | None = None) -> "AppError":
        info = error.value
        return cls(message or info.message, info.http_status, info.code)
