# bootcamp_api/utils/slug.py
import re
import unicodedata


def slugify(value: str) -> str:
    """'ModernTech Bootcamp!' -> 'moderntech-bootcamp'"""
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-z0-9]+", "-", value.lower())
    return value.strip("-")
