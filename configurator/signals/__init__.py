"""
Configurator signals.

Signals:
    configuration_finalized:
        Sent after a selection passes the add-to-cart checks.

        Kwargs:
            sender: ConfiguratorService class
            product_id: int
            line_item: CartLineItem (serialized selection, no price)

        Example handler::

            from configurator.signals import configuration_finalized

            def on_finalized(sender, product_id, line_item, **kwargs):
                cart.add(line_item.as_dict())

            configuration_finalized.connect(on_finalized)

    catalog_inconsistency:
        Sent when a persisted selection no longer fits the catalog and was
        reset to defaults.

        Kwargs:
            sender: ConfiguratorService class
            product_id: int
            problems: list[str]

    price_adjustment_changed:
        Sent after a VariationOption's price_adjustment_q changes.

        Kwargs:
            sender: VariationOption class
            instance: The VariationOption instance
            old_price_adjustment_q: int
            new_price_adjustment_q: int
"""

from django.dispatch import Signal

configuration_finalized = Signal()
catalog_inconsistency = Signal()
price_adjustment_changed = Signal()
