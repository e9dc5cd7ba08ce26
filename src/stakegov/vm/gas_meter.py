"""
Gas metering for the simulated hosting chain.

Contract code charges gas for the storage, call, log and crypto operations
it performs; the meter of the enclosing transaction accumulates the cost so
callers (the gas compensator) can observe what a call consumed.
"""

from enum import Enum
from typing import Dict, Union


class GasCost(Enum):
    """Gas cost constants."""

    BASE = 2
    SLOAD = 2100
    SSTORE = 20000
    SRESET = 5000
    BALANCE = 400
    EXTCODE = 700
    CALL = 700
    CALLVALUE = 9000
    CREATE = 32000
    LOG = 375
    LOGTOPIC = 375
    SHA3 = 30
    ECRECOVER = 3000
    TRANSACTION = 21000


class GasMeter:
    """Gas meter for one outermost transaction."""

    def __init__(self, gas_limit: int):
        """Initialize gas meter."""
        if gas_limit < 0:
            raise ValueError("Gas limit must be non-negative")

        self.gas_limit = gas_limit
        self.gas_used = 0
        self.storage_cost = 0
        self.call_cost = 0
        self.log_cost = 0
        self.crypto_cost = 0

    @property
    def remaining_gas(self) -> int:
        return self.gas_limit - self.gas_used

    def consume_gas(self, amount: Union[int, GasCost], operation: str = "UNKNOWN") -> bool:
        """Consume gas for an operation. Returns False when out of gas."""
        if isinstance(amount, GasCost):
            operation = amount.name
            amount = amount.value

        if amount < 0:
            raise ValueError("Gas amount must be non-negative")

        if amount > self.remaining_gas:
            return False

        self.gas_used += amount

        if operation in ("SLOAD", "SSTORE", "SRESET"):
            self.storage_cost += amount
        elif operation in ("CALL", "CALLVALUE", "CREATE", "EXTCODE", "BALANCE"):
            self.call_cost += amount
        elif operation in ("LOG", "LOGTOPIC"):
            self.log_cost += amount
        elif operation in ("SHA3", "ECRECOVER"):
            self.crypto_cost += amount

        return True

    def is_out_of_gas(self) -> bool:
        return self.remaining_gas <= 0

    def get_cost_breakdown(self) -> Dict[str, int]:
        """Get breakdown of gas costs by category."""
        return {
            "total_gas_used": self.gas_used,
            "storage_cost": self.storage_cost,
            "call_cost": self.call_cost,
            "log_cost": self.log_cost,
            "crypto_cost": self.crypto_cost,
            "other_cost": self.gas_used
            - self.storage_cost
            - self.call_cost
            - self.log_cost
            - self.crypto_cost,
            "remaining_gas": self.remaining_gas,
        }

    def __repr__(self) -> str:
        return f"GasMeter(limit={self.gas_limit}, used={self.gas_used})"
