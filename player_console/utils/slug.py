import re
import unicodedata


def player_id_from_name(name: str) -> str:
    """Derive a URL-safe player id from a display name ('Ann Lee' -> 'ann-lee')."""
    normalized = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug
