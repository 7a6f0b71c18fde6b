"""
Configurator exception hierarchy.

Rule violations in a submitted configuration are NOT exceptions — validators
return them as ValidationResult error lists. Exceptions here cover collaborator
failures and malformed writes at the selection boundary.
"""
from typing import Optional


class ConfiguratorError(Exception):
    """Base class for configurator failures."""


class CollaboratorError(ConfiguratorError):
    """
    An external collaborator (category repository, order-request store) failed.

    Distinct from rule violations so callers can answer "try again later"
    instead of "fix your input".
    """

    retryable: bool = True

    def __init__(self, operation: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.cause = cause


class ProductTypeNotFoundError(ConfiguratorError):
    """Product type is unknown or not currently active."""

    def __init__(self, product_type: str):
        super().__init__(f'Product type "{product_type}" not found')
        self.product_type = product_type


class InvalidSelectionError(ConfiguratorError, ValueError):
    """A selection value does not match its category's shape."""

    def __init__(self, category: str, message: str):
        super().__init__(f"{category}: {message}")
        self.category = category
