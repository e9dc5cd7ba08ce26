"""
Replaceable governance logic.

The engine is a proxy: its storage names the active ``LogicModule`` class
and every public call is dispatched through an instance of it. A passed
proposal swaps the class through ``ExecutionContext.upgrade_to``; the
storage layout is shared by every version.
"""

import logging

logger = logging.getLogger(__name__)
from typing import TYPE_CHECKING, Any, FrozenSet, Set

from ..errors.exceptions import GovernanceError, ValidationError

if TYPE_CHECKING:
    from ..vm.chain import Chain
    from .core import GovernanceStorage
    from .engine import Governance


class LogicModule:
    """Base class for versions of the governance logic."""

    VERSION = "0"
    # Transacting methods callable through the proxy.
    ENTRY_POINTS: FrozenSet[str] = frozenset()
    # Read-only methods callable through the proxy.
    VIEWS: FrozenSet[str] = frozenset()

    def __init__(self, engine: "Governance"):
        self.engine = engine

    @property
    def storage(self) -> "GovernanceStorage":
        # Always re-read: a reverted transaction replaces the storage object.
        return self.engine.storage

    @property
    def chain(self) -> "Chain":
        return self.engine.chain

    @property
    def address(self) -> str:
        return self.engine.address

    @property
    def now(self) -> int:
        return self.engine.chain.timestamp

    def emit(self, event: str, **args: Any) -> None:
        self.engine.chain.emit(self.engine.address, event, **args)

    @classmethod
    def exported(cls) -> Set[str]:
        names: Set[str] = set()
        for klass in cls.__mro__:
            names |= set(getattr(klass, "ENTRY_POINTS", ()))
            names |= set(getattr(klass, "VIEWS", ()))
        return names

    @classmethod
    def is_entry_point(cls, name: str) -> bool:
        return any(name in getattr(klass, "ENTRY_POINTS", ()) for klass in cls.__mro__)

    def dispatch(self, name: str, *args: Any, **kwargs: Any) -> Any:
        if name not in self.exported():
            raise GovernanceError(
                f"{self.__class__.__name__} v{self.VERSION} has no entry point {name!r}"
            )
        return getattr(self, name)(*args, **kwargs)


def validate_implementation(implementation: Any) -> type:
    """Ensure ``implementation`` can be installed as the active logic."""
    if not isinstance(implementation, type) or not issubclass(implementation, LogicModule):
        raise ValidationError(
            "implementation must be a LogicModule subclass",
            field="implementation",
            value=implementation,
        )
    return implementation
