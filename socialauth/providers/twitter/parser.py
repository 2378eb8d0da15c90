"""Twitter response parsing"""

from urllib.parse import parse_qs

AVATAR_SIZE_SUFFIX = "_normal."
AVATAR_LARGE_SUFFIX = "_400x400."


def split_query(query: str) -> dict[str, str]:
    """Flat key/value dict from a URL-encoded query string, first value wins"""
    parsed = parse_qs(query.strip().lstrip("?"), keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items() if values}


def parse_access_token(query: str) -> tuple[str, str] | None:
    """(oauth_token, oauth_token_secret) from an access_token response"""
    values = split_query(query)
    key = values.get("oauth_token")
    secret = values.get("oauth_token_secret")
    if key is None or secret is None:
        return None
    return key, secret


def large_avatar(url: str) -> str:
    return url.replace(AVATAR_SIZE_SUFFIX, AVATAR_LARGE_SUFFIX)


def parse_verified_user(data: dict) -> dict | None:
    """Profile fields of verify_credentials, None if a required one is missing"""
    required = ("id_str", "name", "screen_name", "profile_image_url_https")
    if not all(isinstance(data.get(key), str) for key in required):
        return None

    email = data.get("email")
    return {
        "id": data["id_str"],
        "name": data["name"],
        "screen_name": data["screen_name"],
        "avatar": large_avatar(data["profile_image_url_https"]),
        "email": email if isinstance(email, str) else None,
    }
