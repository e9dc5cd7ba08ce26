"""Narrow interface the governance engine uses to reach its token."""

from abc import ABC, abstractmethod
from typing import Union

from ..crypto.permit import PermitDomain
from ..crypto.signatures import Signature


class TokenInterface(ABC):
    """Fungible-balance service with a structured-data permit capability."""

    @property
    @abstractmethod
    def domain(self) -> PermitDomain:
        """Structured-data domain bound into permit signatures."""

    @abstractmethod
    def balance_of(self, account: str) -> int:
        pass

    @abstractmethod
    def transfer(self, sender: str, to: str, amount: int) -> bool:
        pass

    @abstractmethod
    def transfer_from(self, sender: str, owner: str, to: str, amount: int) -> bool:
        """Move ``owner``'s tokens using ``sender``'s allowance."""

    @abstractmethod
    def permit(
        self,
        sender: str,
        owner: str,
        spender: str,
        value: int,
        deadline: int,
        signature: Union[Signature, bytes, str],
    ) -> None:
        """Set an allowance from a signed authorization."""

    @abstractmethod
    def nonces(self, owner: str) -> int:
        pass
