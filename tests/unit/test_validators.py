"""Tests for input validators (src/teamledger/core/validators.py)."""

import pytest
from pydantic import ValidationError

from src.teamledger.core.validators import (
    MAX_SLUG_BASE_LENGTH,
    SLUG_SUFFIX_LENGTH,
    generate_slug,
    normalize_email,
    validate_password_strength,
)
from src.teamledger.schemas import InviteCreateRequest, SignupRequest

pytestmark = pytest.mark.unit


class TestNormalizeEmail:
    def test_lowercases_and_strips(self):
        assert normalize_email("  Alice@Example.COM ") == "alice@example.com"


class TestGenerateSlug:
    def test_readable_base_and_suffix(self):
        slug = generate_slug("Acme Corp!")

        base, suffix = slug.rsplit("-", 1)
        assert base == "acme-corp"
        assert len(suffix) == SLUG_SUFFIX_LENGTH

    def test_slugs_are_unique(self):
        assert generate_slug("Acme") != generate_slug("Acme")

    def test_long_names_are_truncated(self):
        slug = generate_slug("x" * 200)
        assert len(slug) == MAX_SLUG_BASE_LENGTH + SLUG_SUFFIX_LENGTH + 1

    def test_name_without_slug_characters(self):
        assert len(generate_slug("!!!")) == SLUG_SUFFIX_LENGTH


class TestPasswordStrength:
    def test_valid_password(self):
        assert validate_password_strength("Str0ng!pass") == "Str0ng!pass"

    @pytest.mark.parametrize(
        ("password", "message"),
        [
            ("Sh0rt!", "at least"),
            ("NOLOWER123!", "lowercase"),
            ("noupper123!", "uppercase"),
            ("NoNumbers!!", "number"),
            ("NoSpecial123", "special"),
        ],
    )
    def test_rejections(self, password, message):
        with pytest.raises(ValueError, match=message):
            validate_password_strength(password)


class TestRequestSchemas:
    def test_signup_rejects_weak_password(self):
        with pytest.raises(ValidationError):
            SignupRequest(email="a@example.com", password="weakpassword", name="A")

    def test_signup_accepts_single_character_name(self):
        request = SignupRequest(email="a@example.com", password="Str0ng!pass", name="A")
        assert request.name == "A"

    def test_invite_cannot_grant_owner(self):
        with pytest.raises(ValidationError):
            InviteCreateRequest(email="b@example.com", role="owner")

    def test_invite_defaults_to_member(self):
        assert InviteCreateRequest(email="b@example.com").role.value == "member"
