# model/decision.py
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional, Union
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


class DecisionStatus(str, Enum):
    approved = "Approved"
    rejected = "Rejected"
    pending = "Pending"


class StructuredQuery(BaseModel):
    """
    Salient fields pulled out of a free-text query. Every field is optional;
    an all-null query is a normal outcome. Values that do not fit a field are
    dropped to null instead of failing the whole object.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    age: Optional[Union[int, float]] = None
    gender: Optional[Literal["male", "female"]] = None
    procedure: Optional[str] = None
    location: Optional[str] = None
    policy_duration: Optional[str] = None

    @field_validator("age", mode="before")
    @classmethod
    def _coerce_age(cls, v: Any) -> Any:
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            return v
        if isinstance(v, str):
            m = _NUMBER.search(v)
            if m is None:
                return None
            num = m.group(0)
            return float(num) if "." in num else int(num)
        return None

    @field_validator("gender", mode="before")
    @classmethod
    def _coerce_gender(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return None
        v = v.strip().lower()
        return v if v in ("male", "female") else None

    @field_validator("procedure", "location", "policy_duration", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        if isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            return str(v)
        if isinstance(v, str):
            return v.strip() or None
        return None

    def is_empty(self) -> bool:
        return all(v is None for v in self.model_dump().values())


class Decision(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    status: DecisionStatus
    amount: Optional[str] = None
    justification: str

    # "APPROVED" / " approved " still map onto the enum; anything else fails.
    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().capitalize()
        return v


class UsedClause(BaseModel):
    """
    A clause as reported in the final result. `score` is only present when
    the pipeline supplied the evidence itself (fallback / repair).
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    dataset: str
    clause_ref: str
    excerpt: str
    score: Optional[float] = None

    @model_serializer(mode="wrap")
    def _drop_missing_score(self, handler: SerializerFunctionWrapHandler) -> dict:
        data = handler(self)
        if data.get("score") is None:
            data.pop("score", None)
        return data


class DecisionResult(BaseModel):
    parsed_query: StructuredQuery
    decision: Decision
    clauses_used: list[UsedClause]


class AuditRecord(BaseModel):
    query: str
    parsed_query: StructuredQuery
    decision: Decision
    clauses_used: list[UsedClause]
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_result(cls, query: str, result: DecisionResult) -> "AuditRecord":
        return cls(
            query=query,
            parsed_query=result.parsed_query,
            decision=result.decision,
            clauses_used=result.clauses_used,
        )
