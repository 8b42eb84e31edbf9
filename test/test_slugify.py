"""
Tests for slug helpers

Tests event slug generation from names and slug validation.
"""

import pytest

from conftest import future_date
from sharehub.schemas.event import EventCreate
from sharehub.services.event_service import create_event, generate_unique_slug
from sharehub.utils.slugify import is_valid_slug, slugify


class TestSlugify:
    def test_simple_name(self):
        assert slugify("Annual Conference") == "annual-conference"

    def test_special_characters_collapse(self):
        assert slugify("Q&A: Ask Us Anything!") == "q-a-ask-us-anything"
        assert slugify("  --Tech   Summit--  ") == "tech-summit"

    def test_accents_transliterated(self):
        assert slugify("Fête de la Musique") == "fete-de-la-musique"
        assert slugify("Größe Halle") == "grosse-halle"

    def test_max_length_does_not_end_with_hyphen(self):
        slug = slugify("word " * 40, max_length=12)
        assert len(slug) <= 12
        assert not slug.endswith("-")

    def test_only_symbols(self):
        assert slugify("!!!") == ""


class TestIsValidSlug:
    @pytest.mark.parametrize("slug", ["abc", "summer-gala", "event-2030", "a" * 100])
    def test_valid(self, slug):
        assert is_valid_slug(slug)

    @pytest.mark.parametrize(
        "slug",
        ["ab", "a" * 101, "Summer-Gala", "summer--gala", "-gala", "gala-", "summer gala", "gala_night"],
    )
    def test_invalid(self, slug):
        assert not is_valid_slug(slug)


class TestGenerateUniqueSlug:
    async def test_suffixes_on_collision(self, db, seed, admin_ctx):
        await create_event(admin_ctx, EventCreate(name="Tech Summit", date=future_date()), db)

        assert await generate_unique_slug(seed["tenant_id"], "Tech Summit", db) == "tech-summit-2"
        assert await generate_unique_slug(seed["other_tenant_id"], "Tech Summit", db) == "tech-summit"

    async def test_short_names_padded(self, db, seed):
        assert await generate_unique_slug(seed["tenant_id"], "AI", db) == "ai-event"
        assert await generate_unique_slug(seed["tenant_id"], "!!!", db) == "event"
