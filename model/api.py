# model/api.py
from pydantic import BaseModel, Field, StrictStr


class SearchRequest(BaseModel):
    query: StrictStr = Field(min_length=1)


class HealthResponse(BaseModel):
    ok: bool
    fragments: int


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    message: str
