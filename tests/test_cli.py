"""Command line entry point."""

import argparse
import json
from unittest.mock import patch

import pytest

from launchpad.cli import main, parse_amount
from launchpad.errors import TokenLocked
from launchpad.launch_types import SCALE


class TestParseAmount:

    def test_whole_and_fractional(self):
        assert parse_amount("1533") == 1533 * SCALE
        assert parse_amount("0.5") == SCALE // 2

    def test_rejects_garbage(self):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_amount("lots")
        with pytest.raises(argparse.ArgumentTypeError):
            parse_amount("-1")


class TestMain:

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_curve(self, capsys):
        assert main(["curve", "--points", "3"]) == 0
        out = capsys.readouterr().out
        assert "Bonding max:      700,000,000" in out
        assert "0.0001533" in out

    def test_init_config(self, tmp_path, capsys):
        path = tmp_path / "launchpad.json"
        assert main(["init-config", str(path)]) == 0
        assert json.loads(path.read_text())["server"]["port"] == 8080

    def test_buy_uses_client(self, capsys):
        with patch("launchpad.cli.LaunchpadClient") as client_cls:
            client_cls.return_value.buy.return_value = 10 ** 25
            code = main(["--api", "http://api.test", "buy", "0xabc",
                         "--amount", "1533", "--caller", "0xcreator"])

        assert code == 0
        client_cls.assert_called_once_with("http://api.test", timeout=30)
        client_cls.return_value.buy.assert_called_once_with(
            "0xabc", 1533 * SCALE, 0, "0xcreator")
        assert "Bought 10,000,000 units" in capsys.readouterr().out

    def test_sell_approves_first(self):
        with patch("launchpad.cli.LaunchpadClient") as client_cls:
            client_cls.return_value.sell.return_value = SCALE
            assert main(["sell", "0xabc", "--amount", "1", "--caller", "0xc"]) == 0

        api = client_cls.return_value
        api.approve.assert_called_once_with("0xabc", SCALE, "0xc")
        api.sell.assert_called_once_with("0xabc", SCALE, "0xc")

    def test_engine_error_exit_code(self, capsys):
        with patch("launchpad.cli.LaunchpadClient") as client_cls:
            client_cls.return_value.buy.side_effect = TokenLocked("DOGE is locked")
            code = main(["buy", "0xabc", "--amount", "1", "--caller", "0xalice"])

        assert code == 1
        assert "TokenLocked" in capsys.readouterr().err
