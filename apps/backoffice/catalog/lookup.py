"""
Catalog lookup - batch price reads for the pricing engine.

The ledger depends on the CatalogLookup protocol only; MenuCatalog is the
ORM-backed implementation used in production.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import Protocol

from django.db import DatabaseError

from apps.backoffice.catalog.models import MenuItem
from apps.backoffice.core.exceptions import DependencyUnavailable

logger = logging.getLogger(__name__)


class CatalogLookup(Protocol):
    """Source of truth for current menu prices."""

    def batch_get_prices(self, ids: Iterable[int]) -> dict[int, Decimal]:
        """
        Return the current price of every known, available item.

        Unknown or unavailable ids are simply absent from the result.
        """
        ...


class MenuCatalog:
    """CatalogLookup backed by the MenuItem table."""

    def batch_get_prices(self, ids: Iterable[int]) -> dict[int, Decimal]:
        """
        Single query for all requested ids.

        Raises:
            DependencyUnavailable: If the database cannot be read
        """
        unique_ids = set(ids)
        if not unique_ids:
            return {}

        try:
            rows = MenuItem.objects.filter(
                pk__in=unique_ids, is_available=True
            ).values_list("pk", "price")
            return {pk: price for pk, price in rows}
        except DatabaseError as e:
            logger.exception("Catalog lookup failed for %d items", len(unique_ids))
            raise DependencyUnavailable("Catalog is unavailable") from e
