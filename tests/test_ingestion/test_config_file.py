"""Tests for the line-oriented config loader."""

from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

import pytest

from chainledger.context import RunContext
from chainledger.exceptions import ConfigError
from chainledger.ingestion.config_file import ConfigLoader

SOURCE = Path("test.conf")


class TestConfigLoader:
    def setup_method(self):
        self.context = RunContext()
        self.loader = ConfigLoader(self.context)

    def test_accounts_and_labels(self):
        self.loader.load_text(
            "add 0xABC Main wallet  # my first\n"
            "label 0xDEF Uniswap Router\n"
            "hide 0x111 0x222\n",
            SOURCE,
        )
        accounts = self.context.accounts
        assert accounts.is_tracked("0xabc")
        assert accounts.get_or_create("0xabc").label == "Main wallet"
        assert accounts.get_or_create("0xdef").label == "Uniswap Router"
        assert not accounts.is_tracked("0xdef")
        assert accounts.hidden_addresses() == ["0x111", "0x222"]

    def test_add_without_label_keeps_address(self):
        self.loader.load_text("add 0xabc", SOURCE)
        assert self.context.accounts.get_or_create("0xabc").is_unknown

    def test_tokens(self):
        self.loader.load_text("token 0xA0B8 USDC 6 USD Coin\ntoken 0x6B17 DAI", SOURCE)
        usdc = self.context.tokens.is_allowed_contract("0xa0b8")
        assert (usdc.symbol, usdc.decimals, usdc.name) == ("USDC", 6, "USD Coin")
        assert self.context.tokens.is_allowed_contract("0x6b17").decimals == 18

    def test_options(self):
        self.loader.load_text(
            "etherscanApiKey SECRET\n"
            "ignoreSymbols SPAM 0xBAD\n"
            "blockNumber 19000000\n"
            "startDate 2024-01-01\n"
            "endDate 2024-12-31T23:59:59\n"
            "includeFees\n"
            "benchmark ETH 25\n"
            "allowUnlistedTokens off\n",
            SOURCE,
        )
        options = self.context.options
        assert options.api_key() == "SECRET"
        assert options.ignored_symbols == {"SPAM", "0xBAD"}
        assert options.is_ignored("OTHER", "0xbad")
        assert options.end_block == 19000000
        assert options.start_date == datetime(2024, 1, 1, tzinfo=UTC)
        assert options.end_date == datetime(2024, 12, 31, 23, 59, 59, tzinfo=UTC)
        assert options.include_fees
        assert options.benchmark == "ETH"
        assert options.profit_threshold == Decimal("25")
        assert not options.allow_unlisted_tokens

    def test_unknown_command_skipped(self, caplog):
        self.loader.load_text("cluster 0xabc 0xdef\nadd 0xabc", SOURCE)
        assert "unknown command" in caplog.text
        assert self.context.accounts.is_tracked("0xabc")

    def test_errors_carry_line_number(self):
        with pytest.raises(ConfigError) as exc_info:
            self.loader.load_text("# header\nblockNumber soon", SOURCE)
        assert exc_info.value.line == 2
        assert "test.conf:2" in str(exc_info.value)

    def test_missing_arguments(self):
        with pytest.raises(ConfigError):
            self.loader.load_text("token 0xabc", SOURCE)
        with pytest.raises(ConfigError):
            self.loader.load_text("startDate yesterday", SOURCE)
        with pytest.raises(ConfigError):
            self.loader.load_text("includeFees maybe", SOURCE)


class TestIncludes:
    def test_include_relative_to_file(self, tmp_path):
        (tmp_path / "common.conf").write_text("token 0xa0b8 USDC 6\n")
        main = tmp_path / "main.conf"
        main.write_text("include common.conf\nadd 0xabc Wallet\n")
        context = RunContext()
        ConfigLoader(context).load(main)
        assert context.tokens.is_allowed_contract("0xa0b8") is not None
        assert context.accounts.is_tracked("0xabc")

    def test_include_cycle_loaded_once(self, tmp_path):
        a = tmp_path / "a.conf"
        b = tmp_path / "b.conf"
        a.write_text("include b.conf\nadd 0xaaa\n")
        b.write_text("include a.conf\nadd 0xbbb\n")
        context = RunContext()
        ConfigLoader(context).load(a)
        assert [account.address for account in context.accounts.tracked_accounts()] == ["0xbbb", "0xaaa"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            ConfigLoader(RunContext()).load(tmp_path / "missing.conf")
