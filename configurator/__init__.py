"""
Django Configurator - configurable products, bundles and live pricing.

Usage:
    from configurator import ConfiguratorService, ConfiguratorError

    selection = ConfiguratorService.defaults(product_id)
    price = ConfiguratorService.price(product_id, selection)
    line = ConfiguratorService.finalize(product_id, selection, quantity=2)
"""


def __getattr__(name):
    if name == "ConfiguratorService":
        from configurator.service import ConfiguratorService

        return ConfiguratorService
    elif name == "ConfiguratorError":
        from configurator.exceptions import ConfiguratorError

        return ConfiguratorError
    elif name == "SelectionState":
        from configurator.selection import SelectionState

        return SelectionState
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["ConfiguratorService", "ConfiguratorError", "SelectionState"]
__version__ = "0.1.0"
