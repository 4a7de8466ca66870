import json
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, List

from ..shared_blob import QUESTIONS_PREFIX

REQUIRED_FIELDS = ("question", "options")
DEFAULT_DIFFICULTY = "medium"

_ID_ALPHABET = string.digits + string.ascii_lowercase


class CorruptRecordError(ValueError):
    """A stored blob could not be read back as a question record."""


def new_question_id() -> str:
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"q_{int(time.time() * 1000)}_{suffix}"


def utc_timestamp() -> str:
    # 2026-10-18T12:00:00.000Z
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def question_path(question_id: str) -> str:
    return f"{QUESTIONS_PREFIX}{question_id}.json"


def missing_required_fields(body: Any) -> List[str]:
    if not isinstance(body, dict):
        return list(REQUIRED_FIELDS)
    return [name for name in REQUIRED_FIELDS if not body.get(name)]


def build_record(body: Dict[str, Any]) -> Dict[str, Any]:
    """Build the stored record from a validated POST body.

    Optional fields fall back to their defaults when absent or empty; the
    caller's ``id`` is kept when given, so re-posting an id overwrites it.
    """
    return {
        "id": body.get("id") or new_question_id(),
        "question": body["question"],
        "options": body["options"],
        "correctAnswer": body.get("correctAnswer") or None,
        "subject": body.get("subject") or "",
        "difficulty": body.get("difficulty") or DEFAULT_DIFFICULTY,
        "tags": body.get("tags") or [],
        "createdAt": utc_timestamp(),
    }


def record_id_from_path(pathname: str) -> str:
    return pathname.replace(QUESTIONS_PREFIX, "", 1).replace(".json", "", 1)


def parse_stored_record(text: str, pathname: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except ValueError as ex:
        raise CorruptRecordError(f"{pathname}: invalid JSON ({ex})") from ex
    if not isinstance(data, dict):
        raise CorruptRecordError(f"{pathname}: expected a JSON object, got {type(data).__name__}")
    return data
