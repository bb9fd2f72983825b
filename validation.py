# validation.py
import re
from typing import Any, Dict, List

from email_validator import validate_email, EmailNotValidError

USERNAME_MIN_LENGTH = 5
_ALNUM = re.compile(r"[A-Za-z0-9]+")


def _violation(field: str, message: str) -> Dict[str, str]:
    return {"field": field, "message": message}


def validate_user(payload: Dict[str, Any]) -> List[Dict[str, str]]:
    """
    Checks a registration / profile-update payload.
    Returns a list of field violations; an empty list means the payload is valid.
    """
    errors = []

    username = payload.get("username") or ""
    if len(username) < USERNAME_MIN_LENGTH:
        errors.append(_violation("username", f"Username must be at least {USERNAME_MIN_LENGTH} characters long"))
    if username and not _ALNUM.fullmatch(username):
        errors.append(_violation("username", "Username contains non alphanumeric characters - not allowed"))

    if not payload.get("password"):
        errors.append(_violation("password", "Password is required"))

    email = payload.get("email") or ""
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        errors.append(_violation("email", "Email does not appear to be valid"))

    return errors
