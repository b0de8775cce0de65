from .transaction import Transaction, TRANSACTION_TYPES, TRANSACTION_STATUSES, PAYMENT_METHODS

__all__ = ["Transaction", "TRANSACTION_TYPES", "TRANSACTION_STATUSES", "PAYMENT_METHODS"]
