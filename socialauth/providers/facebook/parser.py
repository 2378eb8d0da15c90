"""Facebook Graph API response parsing"""

from ...core.exceptions import FacebookAPIError

AVATAR_URL = "https://graph.facebook.com/{id}/picture?type=large"


def parse_error(data: dict) -> FacebookAPIError | None:
    """Graph error object, None when the body does not carry a complete one

    Expected shape: {"error": {"code": 190, "type": "...", "message": "...",
    "error_subcode": 458}}, error_subcode is optional.
    """
    error = data.get("error")
    if not isinstance(error, dict):
        return None

    code = error.get("code")
    error_type = error.get("type")
    message = error.get("message")
    if not _is_int(code) or not isinstance(error_type, str) or not isinstance(message, str):
        return None

    subcode = error.get("error_subcode")
    return FacebookAPIError(
        code=code,
        type=error_type,
        message=message,
        subcode=subcode if _is_int(subcode) else None,
    )


def avatar_url(user_id: str) -> str:
    return AVATAR_URL.format(id=user_id)


def parse_profile(data: dict) -> tuple[str, str, str | None] | None:
    """(id, name, email) from a /me response, None if id or name are missing"""
    user_id = data.get("id")
    name = data.get("name")
    if not isinstance(user_id, str) or not isinstance(name, str):
        return None
    email = data.get("email")
    return user_id, name, email if isinstance(email, str) else None


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
