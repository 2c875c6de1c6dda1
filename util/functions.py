# util/functions.py
def strip_code_fences(text: str | None) -> str:
    """
    Remove markdown fence markers (```json / ```) that models wrap JSON in.
    """
    if not text:
        return ""
    return text.replace("```json", "").replace("```", "").strip()


def from_first_brace(text: str) -> str | None:
    """
    Return `text` from its first '{' to the end, or None when there is none.
    Drops any commentary a model prepends to its JSON answer.
    """
    start = text.find("{")
    if start < 0:
        return None
    return text[start:]


def error_envelope(code: str, message: str) -> dict:
    return {"ok": False, "error": code, "message": message}
