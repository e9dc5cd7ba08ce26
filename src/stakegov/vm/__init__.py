"""Simulated hosting chain: clock, contracts, gas and event log."""

from .chain import DEFAULT_GAS_PRICE, Chain, Transaction
from .contract import ZERO_ADDRESS, Contract, ContractEvent, normalize_address
from .events import EventLog
from .gas_meter import GasCost, GasMeter

__all__ = [
    "Chain",
    "Transaction",
    "DEFAULT_GAS_PRICE",
    "Contract",
    "ContractEvent",
    "ZERO_ADDRESS",
    "normalize_address",
    "EventLog",
    "GasCost",
    "GasMeter",
]
