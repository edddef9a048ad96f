"""Account registry: one record per normalized address."""

import re
from collections.abc import Iterator

from chainledger.models.account import Account

_HEX_ADDRESS = re.compile(r"^0x[0-9a-fA-F]+$")


def normalize_address(address: str) -> str:
    """Lowercase hex addresses; anything else (labels, sinks) passes through."""
    address = address.strip()
    if _HEX_ADDRESS.match(address):
        return address.lower()
    return address


class AccountRegistry:
    """Arena of Account records keyed by normalized address.

    Repeated lookups of the same address return the same object, so callers
    may hold references and still observe later ``add``/``label``/``hide``
    directives.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._hidden: set[str] = set()
        self._resolved: dict[str, None] = {}

    def get_or_create(self, address: str) -> Account:
        key = normalize_address(address)
        account = self._accounts.get(key)
        if account is None:
            account = Account(address=key, label=key)
            account._hidden_set = self._hidden
            self._accounts[key] = account
        return account

    def resolve(self, address: str) -> Account:
        """Look up an address seen in transfer data and remember it for diagnostics."""
        account = self.get_or_create(address)
        self._resolved[account.address] = None
        return account

    def mark_added(self, address: str, label: str | None = None, start_block: int = 0) -> Account:
        account = self.get_or_create(address)
        account.added = True
        account.start_block = start_block
        if label:
            account.label = label
        return account

    def label(self, address: str, label: str) -> Account:
        account = self.get_or_create(address)
        account.label = label
        return account

    def hide(self, *addresses: str) -> None:
        for address in addresses:
            self._hidden.add(normalize_address(address))

    def is_tracked(self, address: str) -> bool:
        account = self._accounts.get(normalize_address(address))
        return account is not None and account.added

    def is_hidden(self, address: str) -> bool:
        return normalize_address(address) in self._hidden

    def tracked_accounts(self) -> list[Account]:
        return [account for account in self._accounts.values() if account.added]

    def hidden_addresses(self) -> list[str]:
        return sorted(self._hidden)

    def unknown_accounts(self) -> list[Account]:
        """Accounts seen in transfers that never received a label."""
        return [
            self._accounts[address]
            for address in self._resolved
            if self._accounts[address].is_unknown
        ]

    def __contains__(self, address: str) -> bool:
        return normalize_address(address) in self._accounts

    def __iter__(self) -> Iterator[Account]:
        return iter(self._accounts.values())

    def __len__(self) -> int:
        return len(self._accounts)
