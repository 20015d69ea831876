"""Configurator exceptions."""

from typing import Any


ERROR_MESSAGES = {
    "PRODUCT_NOT_FOUND": "Product not found",
    "UNKNOWN_AXIS": "Unknown variation axis",
    "UNKNOWN_BUNDLE_ITEM": "Unknown bundle item",
    "INVALID_VALUE": "Invalid value for variation axis",
    "INVALID_QUANTITY": "Invalid quantity",
    "INVALID_CONFIGURATION": "Configuration is incomplete",
    "UNAVAILABLE": "Configuration is out of stock",
    "CATALOG_INCONSISTENCY": "Configuration no longer matches the catalog",
    "TRANSIENT_FAILURE": "Temporary failure computing price or stock",
    "STALE_COMPUTATION": "Result belongs to a superseded selection",
    "SHARED_CONFIG_NOT_FOUND": "Shared configuration not found",
    "SHARE_CODE_UNAVAILABLE": "Could not allocate a share code",
}


class ConfiguratorError(Exception):
    """
    Structured exception for configurator operations.

    Usage:
        try:
            line = ConfiguratorService.finalize(product_id, selection)
        except ConfiguratorError as e:
            if e.code == "INVALID_CONFIGURATION":
                for violation in e.data["violations"]:
                    print(violation["message"])
    """

    default_code = "CONFIGURATOR_ERROR"

    def __init__(self, code: str | None = None, message: str = "", **data: Any) -> None:
        self.code = code or self.default_code
        self.message = message or ERROR_MESSAGES.get(self.code, self.code)
        self.data = data
        super().__init__(f"[{self.code}] {self.message}")

    @property
    def product_id(self) -> int | None:
        return self.data.get("product_id")

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }


class CatalogInconsistency(ConfiguratorError):
    """A selection references ids the catalog no longer has. Fatal to the configuration."""

    default_code = "CATALOG_INCONSISTENCY"

    @property
    def problems(self) -> list[str]:
        return self.data.get("problems", [])


class TransientComputationFailure(ConfiguratorError):
    """Price or stock could not be computed right now. Recoverable."""

    default_code = "TRANSIENT_FAILURE"


class StaleComputation(ConfiguratorError):
    """A result arrived for a selection that has since changed."""

    default_code = "STALE_COMPUTATION"

    @property
    def sequence(self) -> int | None:
        return self.data.get("sequence")
