"""Committed event log of the simulated hosting chain."""

from typing import Iterator, List, Optional

from .contract import ContractEvent


class EventLog:
    """Append-only list of committed contract events."""

    def __init__(self):
        self.events: List[ContractEvent] = []

    def append(self, event: ContractEvent) -> None:
        self.events.append(event)

    def truncate(self, length: int) -> None:
        """Drop events recorded after ``length`` (snapshot revert)."""
        del self.events[length:]

    def filter(
        self, address: Optional[str] = None, name: Optional[str] = None
    ) -> List[ContractEvent]:
        """Return committed events matching the address and/or name."""
        return [event for event in self.events if event.matches_filter(address, name)]

    def last(self, name: str, address: Optional[str] = None) -> Optional[ContractEvent]:
        matches = self.filter(address=address, name=name)
        return matches[-1] if matches else None

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[ContractEvent]:
        return iter(self.events)
