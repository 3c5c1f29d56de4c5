"""Exceptions raised by grain arithmetic and harvest computation"""
from typing import Any


class HarvestError(Exception):
    """Base exception for harvest computation errors"""
    pass


class InvalidAmount(HarvestError):
    """A strategy's configured amount is negative"""

    def __init__(self, amount: Any):
        self.amount = amount
        super().__init__(f"invalid harvest amount: {amount}")


class UnsupportedStrategyVersion(HarvestError):
    """Strategy type is known but its version is not implemented"""

    def __init__(self, kind: str, version: int):
        self.kind = kind
        self.version = version
        super().__init__(f"Unsupported {kind} strategy: {version}")


class UnknownStrategyType(HarvestError):
    """
    Strategy type is not recognized at all.

    This is a programming error: strategies are validated as a closed union
    before they reach the engine, so it should never be raised for parsed input.
    """

    def __init__(self, strategy_type: Any):
        self.strategy_type = strategy_type
        super().__init__(f"Unexpected strategy type: {strategy_type!r}")


class InvalidNumberError(HarvestError):
    """A non-finite (or negative) number reached grain scaling"""

    def __init__(self, value: Any, reason: str = "must be finite"):
        self.value = value
        super().__init__(f"invalid number {value!r}: {reason}")
