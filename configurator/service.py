"""
Configurator public API.

CORE (essential):
    ConfiguratorService.get_definition(product_id)         - Product definition
    ConfiguratorService.defaults(product_id)               - Default selection
    ConfiguratorService.validate(product_id, selection)    - Structural violations
    ConfiguratorService.price(product_id, selection)       - Price breakdown
    ConfiguratorService.availability(product_id, selection) - Stock verdict
    ConfiguratorService.evaluate(product_id, selection)    - All three at once

CART / ORDER:
    ConfiguratorService.finalize(product_id, selection, quantity) - CartLineItem
    ConfiguratorService.authoritative_price(line)          - Re-price at order time
    ConfiguratorService.cross_check(product_id, selection) - Local vs server price

CONSISTENCY:
    ConfiguratorService.reconcile(product_id, selection)   - Raise on stale ids
    ConfiguratorService.restore(product_id, data)          - Load, reset if stale

CONVENIENCE (helpers):
    ConfiguratorService.price_bounds(product_id)           - Cheapest / dearest total
    ConfiguratorService.open_session(product_id)           - Live ConfiguratorSession
    ConfiguratorService.share(product_id, selection)       - Short-code link
    ConfiguratorService.open_shared(code)                  - Restore a shared link
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from functools import partial
from typing import TYPE_CHECKING, Any

from configurator import engine
from configurator.conf import configurator_settings, get_catalog_backend
from configurator.coordinator import Evaluation
from configurator.exceptions import CatalogInconsistency, ConfiguratorError
from configurator.protocols import (
    AvailabilityVerdict,
    CartLineItem,
    PriceBreakdown,
    PriceCheck,
    ProductDefinition,
    StructuralViolation,
)
from configurator.selection import SelectionState

if TYPE_CHECKING:
    from configurator.models import SharedConfiguration
    from configurator.session import ConfiguratorSession

logger = logging.getLogger(__name__)

RESET_NOTICE = "Some of your choices are no longer offered, so this product was reset to its default configuration."

# Attempts at drawing an unused share code before giving up
SHARE_CODE_ATTEMPTS = 5


@dataclass(frozen=True)
class RestoredSelection:
    """Outcome of loading a persisted selection."""

    selection: SelectionState
    problems: tuple[str, ...] = field(default=())

    @property
    def was_reset(self) -> bool:
        return bool(self.problems)

    @property
    def notice(self) -> str | None:
        """User-visible message when the selection had to be reset."""
        return RESET_NOTICE if self.problems else None


class ConfiguratorService:
    """
    Configurator public API.

    Uses @classmethod for extensibility. Every call goes through the
    configured CatalogBackend (CONFIGURATOR["CATALOG_BACKEND"]).

    ``selection`` arguments accept a SelectionState or its serialized dict.
    """

    # ======================================================================
    # CORE API
    # ======================================================================

    @classmethod
    def _backend(cls):
        return get_catalog_backend()

    @classmethod
    def _selection(
        cls,
        selection: SelectionState | dict | None,
        definition: ProductDefinition | None = None,
        product_id: int | None = None,
    ) -> SelectionState:
        """Accept a SelectionState as is; parse a dict against the product definition."""
        if isinstance(selection, SelectionState):
            return selection
        if definition is None and product_id is not None:
            definition = cls.get_definition(product_id)
        return SelectionState.from_dict(selection, definition)

    @classmethod
    def get_definition(cls, product_id: int) -> ProductDefinition:
        """
        Raises:
            ConfiguratorError: PRODUCT_NOT_FOUND
        """
        definition = cls._backend().get_product_definition(product_id)
        if definition is None:
            raise ConfiguratorError("PRODUCT_NOT_FOUND", product_id=product_id)
        return definition

    @classmethod
    def defaults(cls, product_id: int) -> SelectionState:
        return engine.resolve_defaults(cls.get_definition(product_id))

    @classmethod
    def validate(cls, product_id: int, selection: SelectionState | dict) -> list[StructuralViolation]:
        definition = cls.get_definition(product_id)
        return engine.validate(definition, cls._selection(selection, definition))

    @classmethod
    def price(cls, product_id: int, selection: SelectionState | dict) -> PriceBreakdown:
        """Price of one configured unit, from the backend."""
        return cls._backend().calculate_price(product_id, cls._selection(selection, product_id=product_id))

    @classmethod
    def availability(cls, product_id: int, selection: SelectionState | dict) -> AvailabilityVerdict:
        return cls._backend().check_availability(product_id, cls._selection(selection, product_id=product_id))

    @classmethod
    def evaluate(cls, product_id: int, selection: SelectionState | dict) -> Evaluation:
        """
        Validation, price and stock for one selection, synchronously.

        For request/response views; interactive editing goes through
        ``open_session`` instead.
        """
        selection = cls._selection(selection, product_id=product_id)
        return Evaluation(
            sequence=0,
            violations=tuple(cls.validate(product_id, selection)),
            price=cls.price(product_id, selection),
            availability=cls.availability(product_id, selection),
        )

    # ======================================================================
    # CONSISTENCY
    # ======================================================================

    @classmethod
    def reconcile(cls, product_id: int, selection: SelectionState | dict) -> ProductDefinition:
        """
        Check that every id in ``selection`` still exists in the catalog.

        Returns:
            The current ProductDefinition

        Raises:
            CatalogInconsistency: With ``problems`` listing every stale reference
        """
        definition = cls.get_definition(product_id)
        problems = engine.find_inconsistencies(definition, cls._selection(selection, definition))
        if problems:
            raise CatalogInconsistency(product_id=product_id, problems=problems)
        return definition

    @classmethod
    def restore(cls, product_id: int, data: SelectionState | dict | None) -> RestoredSelection:
        """
        Load a persisted selection (cart line, share link, saved draft).

        A selection that no longer fits the catalog is never patched: it is
        replaced by the default selection and the result carries a notice
        for the user. Sends ``catalog_inconsistency`` in that case.
        """
        from configurator.signals import catalog_inconsistency

        definition = cls.get_definition(product_id)
        selection = cls._selection(data, definition)
        problems = engine.find_inconsistencies(definition, selection)
        if not problems:
            return RestoredSelection(selection=selection)

        logger.warning(
            "Selection for product %s no longer fits the catalog, resetting to defaults: %s",
            product_id,
            "; ".join(problems),
        )
        catalog_inconsistency.send(sender=cls, product_id=product_id, problems=problems)
        return RestoredSelection(selection=engine.resolve_defaults(definition), problems=tuple(problems))

    # ======================================================================
    # CART / ORDER
    # ======================================================================

    @classmethod
    def finalize(cls, product_id: int, selection: SelectionState | dict, quantity: int = 1) -> CartLineItem:
        """
        Re-check a selection from scratch and turn it into a cart line.

        Nothing computed earlier in the session is trusted: consistency,
        validation and stock are all checked again here.

        Args:
            product_id: Product being bought
            selection: The user's selection
            quantity: Units to add

        Returns:
            CartLineItem with the serialized selection (no price)

        Raises:
            ConfiguratorError: INVALID_QUANTITY, PRODUCT_NOT_FOUND,
                INVALID_CONFIGURATION (data["violations"]) or UNAVAILABLE
            CatalogInconsistency: If the selection references stale ids
        """
        from configurator.signals import configuration_finalized

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ConfiguratorError("INVALID_QUANTITY", product_id=product_id, quantity=quantity)

        selection = cls._selection(selection, cls.get_definition(product_id))
        definition = cls.reconcile(product_id, selection)

        violations = engine.validate(definition, selection)
        if violations:
            raise ConfiguratorError(
                "INVALID_CONFIGURATION",
                product_id=product_id,
                violations=[v.as_dict() for v in violations],
            )

        verdict = cls.availability(product_id, selection)
        if not verdict.available:
            raise ConfiguratorError("UNAVAILABLE", product_id=product_id, availability=verdict.as_dict())
        if verdict.limiting_quantity is not None and quantity > verdict.limiting_quantity:
            raise ConfiguratorError(
                "UNAVAILABLE",
                f"Only {verdict.limiting_quantity} available",
                product_id=product_id,
                quantity=quantity,
                available=verdict.limiting_quantity,
            )

        line = CartLineItem(product_id=product_id, quantity=quantity, selection=selection.to_dict())
        logger.info("Finalized configuration of product %s (qty %d)", product_id, quantity)
        configuration_finalized.send(sender=cls, product_id=product_id, line_item=line)
        return line

    @classmethod
    def authoritative_price(cls, line: CartLineItem | dict) -> PriceBreakdown:
        """
        Price a cart line from its persisted selection, at order time.

        Returns the unit breakdown; the line total is
        ``breakdown.extended(line.quantity)``.

        Raises:
            CatalogInconsistency: If the catalog changed under the line
        """
        if isinstance(line, dict):
            line = CartLineItem.from_dict(line)
        selection = SelectionState.from_dict(line.selection, cls.get_definition(line.product_id))
        cls.reconcile(line.product_id, selection)
        return cls._backend().calculate_price(line.product_id, selection)

    @classmethod
    def cross_check(cls, product_id: int, selection: SelectionState | dict) -> PriceCheck:
        """Compare the locally computed price with the backend's."""
        definition = cls.get_definition(product_id)
        selection = cls._selection(selection, definition)
        check = PriceCheck(
            local=engine.calculate_price(definition, selection, places=configurator_settings.CURRENCY_DECIMAL_PLACES),
            server=cls.price(product_id, selection),
            tolerance=Decimal(str(configurator_settings.PRICE_CROSS_CHECK_TOLERANCE)),
        )
        if not check.matches:
            logger.warning(
                "Price mismatch for product %s: local %s, server %s",
                product_id,
                check.local.total,
                check.server.total,
            )
        return check

    # ======================================================================
    # CONVENIENCE
    # ======================================================================

    @classmethod
    def price_bounds(cls, product_id: int) -> tuple[Decimal, Decimal]:
        return engine.price_bounds(
            cls.get_definition(product_id),
            places=configurator_settings.CURRENCY_DECIMAL_PLACES,
        )

    @classmethod
    def open_session(
        cls,
        product_id: int,
        selection: SelectionState | dict | None = None,
        **kwargs: Any,
    ) -> "tuple[ConfiguratorSession, RestoredSelection | None]":
        """
        Start a live session priced and stock-checked by the backend.

        ``selection`` (e.g. from a cart line being edited) is restored
        first; the second element of the result reports whether it had
        to be reset. Extra kwargs go to ConfiguratorSession.
        """
        from configurator.session import ConfiguratorSession

        definition = cls.get_definition(product_id)
        restored = cls.restore(product_id, selection) if selection is not None else None
        backend = cls._backend()
        kwargs.setdefault("debounce", configurator_settings.RECALC_DEBOUNCE_SECONDS)
        kwargs.setdefault("places", configurator_settings.CURRENCY_DECIMAL_PLACES)
        session = ConfiguratorSession(
            definition,
            selection=restored.selection if restored else None,
            pricer=partial(backend.calculate_price, product_id),
            availability=partial(backend.check_availability, product_id),
            **kwargs,
        )
        return session, restored

    @classmethod
    def share(cls, product_id: int, selection: SelectionState | dict) -> "SharedConfiguration":
        """
        Save a selection under a new short code.

        Raises:
            CatalogInconsistency: Stale selections are not shared
        """
        from configurator.models import SharedConfiguration, generate_short_code

        selection = cls._selection(selection, cls.get_definition(product_id))
        cls.reconcile(product_id, selection)
        length = configurator_settings.SHARE_CODE_LENGTH
        for _ in range(SHARE_CODE_ATTEMPTS):
            code = generate_short_code(length)
            if not SharedConfiguration.objects.filter(code=code).exists():
                shared = SharedConfiguration.objects.create(
                    code=code,
                    product_id=product_id,
                    selection=selection.to_dict(),
                )
                logger.info("Shared configuration %s created for product %s", code, product_id)
                return shared
        raise ConfiguratorError("SHARE_CODE_UNAVAILABLE", product_id=product_id)

    @classmethod
    def open_shared(cls, code: str) -> "tuple[SharedConfiguration, RestoredSelection]":
        """
        Open a shared link: count the view and restore its selection.

        Raises:
            ConfiguratorError: SHARED_CONFIG_NOT_FOUND
        """
        from configurator.models import SharedConfiguration

        shared = SharedConfiguration.objects.filter(code=code).first()
        if shared is None:
            raise ConfiguratorError("SHARED_CONFIG_NOT_FOUND", share_code=code)
        shared.record_view()
        return shared, cls.restore(shared.product_id, shared.selection)
