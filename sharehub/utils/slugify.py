import re

from unidecode import unidecode

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slugify(text, max_length=100):
    text = unidecode(text).lower()
    text = re.sub(r'[^a-z0-9]+', '-', text).strip('-')
    return text[:max_length].rstrip('-')


def is_valid_slug(slug: str) -> bool:
    return 3 <= len(slug) <= 100 and bool(SLUG_PATTERN.match(slug))
