import re

from fastapi import HTTPException

_ID = re.compile(r"[0-9]+")


def parse_id(raw: str, detail: str) -> int:
    """Path ids are plain ASCII digits; anything else is a 400 with ``detail``."""
    if not _ID.fullmatch(raw):
        raise HTTPException(status_code=400, detail=detail)
    return int(raw)
