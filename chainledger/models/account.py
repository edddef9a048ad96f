"""Account and token allow-list records."""

from pydantic import BaseModel, PrivateAttr


class Account(BaseModel):
    """An address seen in the transfer data.

    The normalized address doubles as the account id. ``hidden`` is read from
    the owning registry's hide-set, so hiding an address after the record was
    handed out still applies to every holder of the reference.
    """

    address: str
    label: str
    added: bool = False
    start_block: int = 0

    _hidden_set: frozenset[str] | set[str] = PrivateAttr(default_factory=frozenset)

    @property
    def account_id(self) -> str:
        return self.address

    @property
    def hidden(self) -> bool:
        return self.address in self._hidden_set

    @property
    def is_unknown(self) -> bool:
        return self.label == self.address


class TokenInfo(BaseModel):
    address: str
    symbol: str
    decimals: int = 18
    name: str | None = None
