"""
Factories for organizations app models.
"""

import factory
from factory.django import DjangoModelFactory

from apps.organizations.models import Branch, Organization


class OrganizationFactory(DjangoModelFactory):
    """Factory for Organization model."""

    class Meta:
        model = Organization

    name = factory.Sequence(lambda n: f"Church {n}")
    slug = factory.Sequence(lambda n: f"church-{n}")


class BranchFactory(DjangoModelFactory):
    """Factory for Branch model."""

    class Meta:
        model = Branch

    organization = factory.SubFactory(OrganizationFactory)
    name = factory.Sequence(lambda n: f"Branch {n}")
    slug = factory.Sequence(lambda n: f"branch-{n}")
