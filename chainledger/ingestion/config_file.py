"""Line-oriented config files describing tracked accounts and run options.

One command per line, ``#`` starts a comment::

    include common.conf
    etherscanApiKey ABC123
    add 0xabc... Main wallet
    hide 0xdead...
    token 0xa0b8... USDC 6 USD Coin
    ignoreSymbols SPAM 0xbad...
"""

import logging
import re
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

from chainledger.context import RunContext
from chainledger.exceptions import ConfigError

logger = logging.getLogger(__name__)

_COMMENT = re.compile(r"#.*$")
_TRUE = {"on", "true", "yes", "1"}
_FALSE = {"off", "false", "no", "0"}


class ConfigLoader:
    """Applies config-file commands to a RunContext."""

    def __init__(self, context: RunContext):
        self.context = context
        self._loaded: set[Path] = set()
        self._commands: dict[str, Callable[[list[str], Path, int], None]] = {
            "include": self._include,
            "etherscanApiKey": self._api_key,
            "ignoreSymbols": self._ignore_symbols,
            "blockNumber": self._block_number,
            "add": self._add,
            "hide": self._hide,
            "label": self._label,
            "token": self._token,
            "startDate": self._start_date,
            "endDate": self._end_date,
            "includeFees": self._include_fees,
            "benchmark": self._benchmark,
            "allowUnlistedTokens": self._allow_unlisted,
        }

    def load(self, path: Path) -> RunContext:
        path = path.resolve()
        if path in self._loaded:
            logger.warning("Skipping %s: already loaded", path)
            return self.context
        if not path.exists():
            raise ConfigError(path, "file not found")
        logger.info("> Reading input file %s", path.name)
        self._loaded.add(path)
        self.load_text(path.read_text(), path)
        return self.context

    def load_text(self, content: str, source: Path) -> RunContext:
        for line_no, line in enumerate(content.splitlines(), start=1):
            parts = _COMMENT.sub("", line).split()
            if not parts:
                continue
            command, args = parts[0], parts[1:]
            handler = self._commands.get(command)
            if handler is None:
                logger.warning("%s:%d: unknown command %r", source, line_no, line.strip())
                continue
            handler(args, source, line_no)
        return self.context

    # --- commands ---

    def _include(self, args: list[str], source: Path, line_no: int) -> None:
        self._require(args, 1, source, line_no, "include FILE...")
        for name in args:
            self.load(source.parent / name)

    def _api_key(self, args: list[str], source: Path, line_no: int) -> None:
        self._require(args, 1, source, line_no, "etherscanApiKey KEY")
        self.context.options.etherscan_api_key = args[0]

    def _ignore_symbols(self, args: list[str], source: Path, line_no: int) -> None:
        self.context.options.ignored_symbols.update(arg.strip() for arg in args)

    def _block_number(self, args: list[str], source: Path, line_no: int) -> None:
        self._require(args, 1, source, line_no, "blockNumber N")
        self.context.options.end_block = self._int(args[0], source, line_no)

    def _add(self, args: list[str], source: Path, line_no: int) -> None:
        self._require(args, 1, source, line_no, "add ADDRESS [LABEL]")
        label = " ".join(args[1:]) or None
        self.context.accounts.mark_added(args[0], label)

    def _hide(self, args: list[str], source: Path, line_no: int) -> None:
        self.context.accounts.hide(*args)

    def _label(self, args: list[str], source: Path, line_no: int) -> None:
        self._require(args, 2, source, line_no, "label ADDRESS LABEL")
        self.context.accounts.label(args[0], " ".join(args[1:]))

    def _token(self, args: list[str], source: Path, line_no: int) -> None:
        self._require(args, 2, source, line_no, "token ADDRESS SYMBOL [DECIMALS] [NAME]")
        decimals = self._int(args[2], source, line_no) if len(args) > 2 else 18
        name = " ".join(args[3:]) or None
        self.context.tokens.allow(args[0], args[1], decimals, name)

    def _start_date(self, args: list[str], source: Path, line_no: int) -> None:
        self._require(args, 1, source, line_no, "startDate YYYY-MM-DD")
        self.context.options.start_date = self._date(args[0], source, line_no)

    def _end_date(self, args: list[str], source: Path, line_no: int) -> None:
        self._require(args, 1, source, line_no, "endDate YYYY-MM-DD")
        self.context.options.end_date = self._date(args[0], source, line_no)

    def _include_fees(self, args: list[str], source: Path, line_no: int) -> None:
        self.context.options.include_fees = self._flag(args, source, line_no)

    def _benchmark(self, args: list[str], source: Path, line_no: int) -> None:
        self._require(args, 1, source, line_no, "benchmark SYMBOL")
        self.context.options.benchmark = args[0]
        if len(args) > 1:
            try:
                self.context.options.profit_threshold = Decimal(args[1])
            except InvalidOperation as exc:
                raise ConfigError(source, f"invalid profit threshold {args[1]!r}", line_no) from exc

    def _allow_unlisted(self, args: list[str], source: Path, line_no: int) -> None:
        self.context.options.allow_unlisted_tokens = self._flag(args, source, line_no)

    # --- argument helpers ---

    @staticmethod
    def _require(args: list[str], count: int, source: Path, line_no: int, usage: str) -> None:
        if len(args) < count:
            raise ConfigError(source, f"expected: {usage}", line_no)

    @staticmethod
    def _int(value: str, source: Path, line_no: int) -> int:
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigError(source, f"expected an integer, got {value!r}", line_no) from exc

    @staticmethod
    def _date(value: str, source: Path, line_no: int) -> datetime:
        try:
            return datetime.fromisoformat(value)
        except ValueError as exc:
            raise ConfigError(source, f"expected an ISO date, got {value!r}", line_no) from exc

    @staticmethod
    def _flag(args: list[str], source: Path, line_no: int) -> bool:
        value = args[0].lower() if args else "on"
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        raise ConfigError(source, f"expected on/off, got {args[0]!r}", line_no)
