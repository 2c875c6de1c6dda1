# config/settings.py
import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util import constants
from util.enums import Environment


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    REDIS_URL: str = Field(..., validation_alias="REDIS_URL")
    REDIS_SOCKET_TIMEOUT_SECONDS: float = Field(
        default=5.0, validation_alias="REDIS_SOCKET_TIMEOUT_SECONDS"
    )
    AUDIT_TIMEOUT_SECONDS: float = Field(default=2.0, validation_alias="AUDIT_TIMEOUT_SECONDS")

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(..., validation_alias="ALLOWED_ORIGIN")
    RATE_LIMIT_TIMES: int = Field(..., validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(..., validation_alias="RATE_LIMIT_SECONDS")
    TRUST_PROXY: bool = Field(..., validation_alias="TRUST_PROXY")

    # Anthropic Settings
    ANTHROPIC_API_URL: str = Field(..., validation_alias="ANTHROPIC_API_URL")
    ANTHROPIC_API_KEY: str = Field(..., validation_alias="ANTHROPIC_API_KEY")
    ANTHROPIC_MODEL: str = Field(..., validation_alias="ANTHROPIC_MODEL")
    ANTHROPIC_VERSION: str = Field(..., validation_alias="ANTHROPIC_VERSION")
    LLM_TIMEOUT_SECONDS: float = Field(default=60.0, validation_alias="LLM_TIMEOUT_SECONDS")
    EXTRACT_MAX_TOKENS: int = 200
    DECISION_MAX_TOKENS: int = 800

    # Embedding Engine
    EMBEDDING_MODEL_NAME: str = "sentence-transformers/all-MiniLM-L6-v2"
    EMBEDDINGS_FILE: str = Field(
        default=os.path.join("data", "embeddings.json"),
        validation_alias="EMBEDDINGS_FILE",
    )
    PDF_DIR: str = Field(default=os.path.join("data", "pdfs"), validation_alias="PDF_DIR")
    CHUNK_WORDS: int = 500
    CHUNK_OVERLAP_WORDS: int = 50

    # Retrieval policy
    TOP_K: int = Field(default=constants.TOP_K, validation_alias="TOP_K")
    MIN_SIMILARITY: float = Field(
        default=constants.MIN_SIMILARITY, validation_alias="MIN_SIMILARITY"
    )
    MIN_EXCERPT_CHARS: int = constants.MIN_EXCERPT_CHARS

    # Logging knobs
    LOGGER_NAME: str = "clause-sense"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    # Prompts
    EXTRACT_PROMPT: str = (
        "You are a strict JSON extractor.\n"
        "Given an insurance claim or policy query, extract:\n"
        "- age (number) or null\n"
        '- gender ("male"/"female"/null)\n'
        "- procedure (string or null)\n"
        "- location (city or null)\n"
        "- policy_duration (string or null)\n"
        "Respond ONLY with a single valid JSON object with exactly these five keys.\n"
        "Example:\n"
        '{"age":46,"gender":"male","procedure":"knee surgery","location":"Pune","policy_duration":"3 months"}\n'
    )

    DECISION_PROMPT: str = (
        "You are an insurance adjudicator assistant.\n"
        "Decide the claim using ONLY the numbered clauses below.\n"
        "You MUST return ONLY valid JSON in this format:\n"
        "{\n"
        '  "parsed_query": { ... },\n'
        '  "decision": {\n'
        '    "status": "Approved"|"Rejected"|"Pending",\n'
        '    "amount": "<amount or null>",\n'
        '    "justification": "3-5 sentences explaining the reasoning, referencing clauses by number (e.g. CLAUSE_2)."\n'
        "  },\n"
        '  "clauses_used": [\n'
        '    {"dataset":"...","clause_ref":"...","excerpt":"..."}\n'
        "  ]\n"
        "}\n"
        "Rules:\n"
        '- "parsed_query" echoes the parsed query exactly.\n'
        '- "clauses_used" mirrors the clauses you relied on, with their dataset and reference.\n'
        "- No prose outside the JSON object.\n"
    )


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
