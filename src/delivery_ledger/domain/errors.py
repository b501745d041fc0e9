# src/delivery_ledger/domain/errors.py
"""
Ledger error kinds.

Every error is raised synchronously to the immediate caller. None of them
is transient, so nothing here is ever retried.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for every error raised by the ledger core."""


class InvalidExpression(LedgerError, ValueError):
    """Quantity input is malformed or contains disallowed characters."""

    def __init__(self, text: str, reason: str = "Invalid mathematical expression"):
        self.text = text
        self.reason = reason
        super().__init__(f"{reason}: {text!r}")


class EmptyDay(LedgerError):
    """A shipment day has no client entry with a positive quantity."""

    def __init__(self, message: str = "Enter at least one quantity before saving the day"):
        super().__init__(message)


class EmptyEntry(LedgerError):
    """A monthly calculation has no positive-quantity line to save."""

    def __init__(self, message: str = "There are no calculations to save"):
        super().__init__(message)


class NotFound(LedgerError, KeyError):
    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class DuplicateName(LedgerError):
    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} already exists: {name}")


class AlreadySelected(LedgerError):
    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__(f"Client already added to the worksheet: {client_id}")


class InvalidPrice(LedgerError, ValueError):
    def __init__(self, material: str, value: object):
        self.material = material
        self.value = value
        super().__init__(f"Invalid price for {material}: {value!r}")
