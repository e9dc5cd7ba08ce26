"""
In-process hosting chain for governance contracts.

The chain owns the clock, the contract registry, native balances, gas
metering and the event log. ``Chain.transaction`` is the unit of atomicity:
the outermost transaction snapshots every contract's ``state`` and restores
it if anything inside raises, so a failed call leaves no partial mutation.
"""

import logging

logger = logging.getLogger(__name__)
import copy
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar, Union

from eth_utils import keccak, to_checksum_address

from ..errors.exceptions import NotAContract, StakeGovError, ValidationError
from ..logging import LogContext, get_logger
from .contract import Contract, ContractEvent, normalize_address
from .events import EventLog
from .gas_meter import GasCost, GasMeter

DEFAULT_GAS_PRICE = 1_000_000_000
DEFAULT_GAS_LIMIT = 30_000_000

C = TypeVar("C", bound=Contract)


@dataclass
class Transaction:
    """The outermost transaction currently being applied."""

    sender: str
    index: int
    meter: GasMeter
    timestamp: int
    pending_events: List[ContractEvent] = field(default_factory=list)


@dataclass
class _Snapshot:
    states: Dict[str, Any]
    contracts: Dict[str, Contract]
    native_balances: Dict[str, int]
    deploy_nonces: Dict[str, int]
    event_count: int
    timestamp: int


class Chain:
    """Single-threaded simulated chain hosting the governance contracts."""

    def __init__(
        self,
        chain_id: int = 1,
        timestamp: Optional[int] = None,
        gas_price: int = DEFAULT_GAS_PRICE,
        gas_limit: int = DEFAULT_GAS_LIMIT,
    ):
        if chain_id <= 0:
            raise ValidationError("chain id must be positive", field="chain_id")
        if gas_price < 0:
            raise ValidationError("gas price must be non-negative", field="gas_price")

        self.chain_id = chain_id
        self.gas_price = gas_price
        self.gas_limit = gas_limit
        self._timestamp = int(timestamp if timestamp is not None else time.time())

        self.contracts: Dict[str, Contract] = {}
        self.native_balances: Dict[str, int] = {}
        self.deploy_nonces: Dict[str, int] = {}
        self.event_log = EventLog()

        self._tx: Optional[Transaction] = None
        self._depth = 0
        self._tx_count = 0
        self._snapshots: Dict[int, _Snapshot] = {}
        self._next_snapshot_id = 1

    # Clock

    @property
    def timestamp(self) -> int:
        return self._timestamp

    def set_timestamp(self, timestamp: int) -> None:
        """Move the clock to ``timestamp``; time never runs backwards."""
        if self._depth:
            raise StakeGovError("cannot change time inside a transaction")
        if timestamp < self._timestamp:
            raise ValidationError(
                "timestamp cannot decrease", field="timestamp", value=timestamp
            )
        self._timestamp = int(timestamp)

    def advance_time(self, seconds: int) -> int:
        if seconds < 0:
            raise ValidationError("cannot advance time by a negative amount")
        self.set_timestamp(self._timestamp + seconds)
        return self._timestamp

    # Transactions

    @property
    def current_transaction(self) -> Optional[Transaction]:
        return self._tx

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def transaction(self, sender: str) -> Iterator[Transaction]:
        """
        Apply the enclosed operations atomically.

        Nested calls join the outermost transaction but keep a savepoint: a
        failing inner call is rolled back to its entry even when the caller
        handles the error. On any exception the outermost level restores all
        contract state and drops pending events.
        """
        if self._depth:
            savepoint = self._capture()
            pending = len(self._tx.pending_events)
            self._depth += 1
            try:
                yield self._tx
            except BaseException:
                self._restore(savepoint)
                del self._tx.pending_events[pending:]
                logger.debug(
                    f"Nested call in transaction {self._tx.index} rolled back "
                    f"to savepoint at depth {self._depth - 1}"
                )
                raise
            finally:
                self._depth -= 1
            return

        sender = normalize_address(sender, "sender")
        snapshot = self._capture()
        self._tx = Transaction(
            sender=sender,
            index=self._tx_count,
            meter=GasMeter(self.gas_limit),
            timestamp=self._timestamp,
        )
        self._depth = 1
        try:
            yield self._tx
        except BaseException:
            self._restore(snapshot)
            logger.debug(f"Transaction {self._tx.index} from {sender} reverted")
            raise
        else:
            self._commit(self._tx)
        finally:
            self._depth = 0
            self._tx = None
            self._tx_count += 1

    def consume_gas(self, cost: Union[GasCost, int], operation: str = "UNKNOWN") -> None:
        """Charge gas to the current transaction (no-op for read-only calls)."""
        if self._tx is None:
            return
        if not self._tx.meter.consume_gas(cost, operation):
            raise StakeGovError("out of gas", error_code="OUT_OF_GAS")

    @property
    def gas_used(self) -> int:
        return self._tx.meter.gas_used if self._tx is not None else 0

    # Contracts

    def deploy(self, contract: C, deployer: str) -> str:
        """Register ``contract`` at an address derived from the deployer nonce."""
        deployer = normalize_address(deployer, "deployer")
        with self.transaction(deployer):
            nonce = self.deploy_nonces.get(deployer, 0)
            self.deploy_nonces[deployer] = nonce + 1
            raw = keccak(bytes.fromhex(deployer[2:]) + nonce.to_bytes(32, "big"))
            address = to_checksum_address(raw[-20:])
            if address in self.contracts:
                raise StakeGovError(f"address collision at {address}")

            self.consume_gas(GasCost.CREATE)
            contract.attach(self, address)
            self.contracts[address] = contract
            contract.on_deploy(deployer)

        logger.info(f"Deployed {contract.__class__.__name__} at {address}")
        return address

    def has_code(self, address: str) -> bool:
        self.consume_gas(GasCost.EXTCODE)
        return isinstance(address, str) and address in self.contracts

    def get_contract(self, address: str, kind: Optional[Type[C]] = None) -> C:
        contract = self.contracts.get(address)
        if contract is None:
            raise NotAContract(f"no contract at {address}", account=address)
        if kind is not None and not isinstance(contract, kind):
            raise NotAContract(
                f"contract at {address} is not a {kind.__name__}", account=address
            )
        return contract

    # Native currency

    def balance_of(self, account: str) -> int:
        return self.native_balances.get(account, 0)

    def mint_native(self, account: str, amount: int) -> None:
        """Credit native currency out of thin air (genesis allocation)."""
        account = normalize_address(account, "account")
        if amount < 0:
            raise ValidationError("amount must be non-negative", field="amount")
        self.native_balances[account] = self.balance_of(account) + amount

    def transfer_value(self, sender: str, to: str, amount: int) -> None:
        sender = normalize_address(sender, "sender")
        to = normalize_address(to, "to")
        with self.transaction(sender):
            balance = self.balance_of(sender)
            if amount < 0 or balance < amount:
                raise ValidationError(
                    "insufficient native balance", field="amount", value=amount
                )
            self.consume_gas(GasCost.CALLVALUE)
            self.native_balances[sender] = balance - amount
            self.native_balances[to] = self.balance_of(to) + amount

    # Events

    def emit(self, emitter: str, event: str, **args: Any) -> ContractEvent:
        if self._tx is None:
            raise StakeGovError("events can only be emitted inside a transaction")
        self.consume_gas(GasCost.LOG)
        record = ContractEvent(
            address=emitter,
            name=event,
            args=args,
            timestamp=self._timestamp,
            tx_index=self._tx.index,
            log_index=len(self.event_log) + len(self._tx.pending_events),
            sender=self._tx.sender,
        )
        self._tx.pending_events.append(record)
        return record

    # Snapshots

    def snapshot(self) -> int:
        """Capture the whole chain (including time) for a later ``revert``."""
        if self._depth:
            raise StakeGovError("cannot snapshot inside a transaction")
        snapshot_id = self._next_snapshot_id
        self._next_snapshot_id += 1
        self._snapshots[snapshot_id] = self._capture()
        return snapshot_id

    def revert(self, snapshot_id: int) -> None:
        """Restore a snapshot; it and every later snapshot are discarded."""
        if self._depth:
            raise StakeGovError("cannot revert inside a transaction")
        if snapshot_id not in self._snapshots:
            raise ValidationError(f"unknown snapshot {snapshot_id}", field="snapshot_id")
        self._restore(self._snapshots[snapshot_id])
        for key in [key for key in self._snapshots if key >= snapshot_id]:
            del self._snapshots[key]

    def _capture(self) -> _Snapshot:
        return _Snapshot(
            states={
                address: copy.deepcopy(contract.state)
                for address, contract in self.contracts.items()
            },
            contracts=dict(self.contracts),
            native_balances=dict(self.native_balances),
            deploy_nonces=dict(self.deploy_nonces),
            event_count=len(self.event_log),
            timestamp=self._timestamp,
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self.contracts = dict(snapshot.contracts)
        for address, contract in self.contracts.items():
            contract.state = copy.deepcopy(snapshot.states[address])
        self.native_balances = dict(snapshot.native_balances)
        self.deploy_nonces = dict(snapshot.deploy_nonces)
        self.event_log.truncate(snapshot.event_count)
        self._timestamp = snapshot.timestamp

    def _commit(self, tx: Transaction) -> None:
        event_logger = get_logger("stakegov.events")
        for event in tx.pending_events:
            self.event_log.append(event)
            event_logger.info(
                event.name,
                context=LogContext(
                    component="chain",
                    operation=event.name,
                    account=event.sender,
                    address=event.address,
                ),
                extra={"event": event.name, **event.args},
            )
        tx.pending_events.clear()
