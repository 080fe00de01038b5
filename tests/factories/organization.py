"""Organization and membership factories for test data generation."""

from polyfactory import Use

from src.teamledger.core.validators import generate_slug
from src.teamledger.models import Organization, OrganizationMember, Role
from tests.factories.base import BaseFactory, generate_uuid, utc_now


class OrganizationFactory(BaseFactory):
    """Factory for generating Organization test data."""

    __model__ = Organization

    id = Use(generate_uuid)
    name = "Test Organization"
    slug = Use(lambda: generate_slug("Test Organization"))
    owner_id = None  # Required FK - must be set explicitly
    created_at = Use(utc_now)
    updated_at = Use(utc_now)
    deleted_at = None

    @classmethod
    def deleted(cls, **kwargs):
        """Create a soft-deleted organization."""
        return cls.build(deleted_at=utc_now(), **kwargs)


class MembershipFactory(BaseFactory):
    """Factory for generating OrganizationMember test data."""

    __model__ = OrganizationMember

    id = Use(generate_uuid)
    # FK fields - must be set explicitly
    user_id = None
    organization_id = None
    role = Role.MEMBER.value
    joined_at = Use(utc_now)

    @classmethod
    def owner(cls, **kwargs):
        return cls.build(role=Role.OWNER.value, **kwargs)

    @classmethod
    def admin(cls, **kwargs):
        return cls.build(role=Role.ADMIN.value, **kwargs)
