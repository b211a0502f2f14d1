"""Factory classes for takeaway models."""

import factory

from apps.backoffice.catalog.tests.factories import MenuItemFactory
from apps.backoffice.core.tests.factories import UserFactory
from apps.backoffice.takeaway.models import Cart, CartItem


class CartFactory(factory.django.DjangoModelFactory):
    """Factory for Cart model."""

    class Meta:
        model = Cart

    user = factory.SubFactory(UserFactory)


class CartItemFactory(factory.django.DjangoModelFactory):
    """Factory for CartItem model."""

    class Meta:
        model = CartItem

    cart = factory.SubFactory(CartFactory)
    menu_item = factory.SubFactory(MenuItemFactory)
    quantity = 1
