from .salesforce_connection_mixin import SalesforceConnectionMixin

__all__ = [
    "SalesforceConnectionMixin",
]
