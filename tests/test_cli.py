"""
Tests for the command-line interface.

The pipeline factory is patched to talk to the in-process fake
registrar.
"""

import json
from pathlib import Path

import pytest

from ke_domain_search import cli
from ke_domain_search.config import load_config_from_file
from ke_domain_search.models import PricingRecord

from fake_registrar import FakeRegistrar, make_pipeline, pricing_payload


@pytest.fixture
def registrar(monkeypatch) -> FakeRegistrar:
    fake = FakeRegistrar(
        taken={"mybrand.ke"},
        pricing={".co.ke": pricing_payload(1500.0), ".ke": pricing_payload(3000.0)},
    )

    def fake_build_pipeline(config):
        return make_pipeline(fake, config=config)

    monkeypatch.setattr(cli, "build_pipeline", fake_build_pipeline)
    for name in ("KE_SEARCH_LANGUAGE", "KE_SEARCH_API_BASE_URL", "KE_SEARCH_DEBOUNCE"):
        monkeypatch.delenv(name, raising=False)
    return fake


@pytest.fixture
def missing_config(tmp_path: Path) -> str:
    return str(tmp_path / "absent.json")


class TestParser:
    def test_no_command_prints_help(self, capsys) -> None:
        assert cli.main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_search_options(self) -> None:
        args = cli.create_parser().parse_args(["search", "mybrand", "--json", "-l", "sw"])

        assert args.query == "mybrand"
        assert args.json
        assert args.language == "sw"
        assert args.func is cli.cmd_search

    def test_unknown_language_rejected(self) -> None:
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args(["search", "mybrand", "-l", "fr"])


class TestFormatting:
    def test_format_price(self) -> None:
        pricing = PricingRecord(currency="KES", registration_by_term={1: 1500.0})

        assert cli.format_price(pricing, "en") == "KES 1,500/year"
        assert cli.format_price(pricing, "sw") == "KES 1,500/mwaka"
        assert cli.format_price(None, "en") == "Contact for pricing"


class TestCommands:
    def test_search_json(self, registrar, missing_config, capsys) -> None:
        code = cli.main(["search", "MyBrand.co.ke", "--json", "-c", missing_config])

        out = json.loads(capsys.readouterr().out)
        assert code == 0
        assert out[0]["domain"] == "mybrand.co.ke"
        assert out[0]["price"] == 1500.0
        taken = [s for s in out if s["status"] == "taken"]
        assert [s["domain"] for s in taken] == ["mybrand.ke"]
        assert out[-1]["domain"] == "mybrand.ke"

    def test_search_text_in_swahili(self, registrar, missing_config, capsys) -> None:
        code = cli.main(["search", "mybrand", "-l", "sw", "-c", missing_config])

        out = capsys.readouterr().out
        assert code == 0
        assert "Matokeo ya 'mybrand'" in out
        assert "Inapatikana" in out
        assert "Imechukuliwa" in out

    def test_search_too_short(self, registrar, missing_config, capsys) -> None:
        code = cli.main(["search", "a", "-c", missing_config])

        assert code == 1
        assert "at least 2" in capsys.readouterr().err
        assert registrar.calls() == []

    def test_check(self, registrar, missing_config, capsys) -> None:
        code = cli.main(["check", "mybrand.ke", "mybrand.co.ke", "--json", "-c", missing_config])

        out = json.loads(capsys.readouterr().out)
        assert code == 0
        assert out["mybrand.ke"]["status"] == "taken"
        assert out["mybrand.co.ke"]["available"] is True
        assert len(registrar.calls("batch")) == 1

    def test_pricing_reports_failures(self, registrar, missing_config, capsys) -> None:
        code = cli.main(["pricing", ".co.ke", "me.ke", "-c", missing_config])

        out = capsys.readouterr().out
        assert code == 1
        assert "KES 1,500/year" in out
        assert "Pricing unavailable for me.ke" in out


class TestConfigCommand:
    def test_init_show_validate(self, tmp_path: Path, capsys) -> None:
        path = str(tmp_path / "config.json")

        assert cli.main(["config", "init", "-p", path, "-l", "sw"]) == 0
        assert load_config_from_file(Path(path)).language == "sw"
        assert cli.main(["config", "init", "-p", path]) == 1
        assert cli.main(["config", "init", "-p", path, "--force"]) == 0
        assert cli.main(["config", "show", "-p", path]) == 0
        assert cli.main(["config", "validate", "-p", path]) == 0

        out = capsys.readouterr().out
        assert "Configuration created at" in out
        assert "Debounce: 0.3s" in out

    def test_show_missing(self, tmp_path: Path) -> None:
        assert cli.main(["config", "show", "-p", str(tmp_path / "none.json")]) == 1

    def test_invalid_file_exits_with_configuration_error(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"api": {"base_url": "http://insecure.co.ke"}}), encoding="utf-8")

        assert cli.main(["config", "validate", "-p", str(path)]) == 2
        assert "Configuration error" in capsys.readouterr().err
