class EconomyError(Exception):
    """Base class of every failure raised by the economy rules."""


class ValidationError(EconomyError):
    """Unknown asset/upgrade type, negative count or otherwise ill-formed input."""


class InsufficientFundsError(EconomyError):
    """A purchase or prestige was attempted without enough coins."""

    def __init__(self, required: int, available: int):
        super().__init__(f"Insufficient funds: required {required}, available {available}")
        self.required = required
        self.available = available


class InvariantViolation(EconomyError):
    """An operation would break a record invariant (e.g. a negative balance)."""


class StaleStateError(EconomyError):
    """An optimistic write lost the race: the stored version moved on."""


class PlayerNotFoundError(EconomyError):
    """No player record matches the requested id."""
