import json

import pytest
from click.testing import CliRunner

from hostscore import cli
from hostscore.core.currency import siacoins
from hostscore.data.scenario import load_scenario


def _host(key, failures=0, version="1.4.0"):
    return {
        "public_key": key,
        "collateral": "46000000000",
        "max_collateral": "1KS",
        "contract_price": "3SC",
        "storage_price": "23000000000",
        "upload_bandwidth_price": "25000000000000",
        "download_bandwidth_price": "50000000000000",
        "remaining_storage": 10 ** 13,
        "version": version,
        "first_seen_height": 1000,
        "historic_successful_interactions": 50,
        "historic_failed_interactions": failures,
        "scan_history": [
            {"timestamp": f"2024-01-01T{h:02d}:00:00+00:00", "success": True} for h in range(5)
        ],
    }


@pytest.fixture
def scenario_path(tmp_path):
    path = tmp_path / "scenario.json"
    payload = {
        "block_height": 30000,
        "allowance": {"funds": "500SC", "host_count": 50, "period": 12096},
        "hosts": [_host("alpha"), _host("beta", failures=50), _host("gamma", version="1.2.0")],
    }
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_scenario(scenario_path):
    scenario = load_scenario(scenario_path)
    assert scenario.allowance.funds == siacoins(500)
    assert scenario.usage_guidelines is None
    assert [h.public_key for h in scenario.hosts] == ["alpha", "beta", "gamma"]
    assert scenario.find_host("beta").historic_failed_interactions == 50
    assert scenario.find_host("3").public_key == "gamma"
    with pytest.raises(KeyError):
        scenario.find_host("delta")


def test_load_scenario_yaml(tmp_path):
    path = tmp_path / "scenario.yaml"
    path.write_text(
        "block_height: 10\n"
        "allowance:\n"
        "  funds: 1KS\n"
        "  host_count: 10\n"
        "  period: 4032\n"
        "usage_guidelines:\n"
        "  expected_storage: 1000000000\n"
        "hosts:\n"
        "  - public_key: solo\n"
        "    storage_price: 10SC\n"
        "    version: 1.4\n",
        encoding="utf-8",
    )
    scenario = load_scenario(path)
    assert scenario.usage_guidelines.expected_storage == 10 ** 9
    assert scenario.hosts[0].storage_price == siacoins(10)
    assert scenario.hosts[0].version == "1.4"


def test_load_scenario_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_scenario(tmp_path / "missing.json")


def test_rank_json(scenario_path):
    runner = CliRunner()
    result = runner.invoke(cli.cli, ["rank", str(scenario_path), "--json-output"])
    assert result.exit_code == 0, result.output

    rows = json.loads(result.output)
    assert [r["host"] for r in rows] == ["alpha", "beta", "gamma"]
    assert rows[-1]["score"] == "1"
    assert sum(r["conversion_rate"] for r in rows) == pytest.approx(50.0)


def test_rank_text(scenario_path):
    runner = CliRunner()
    result = runner.invoke(cli.cli, ["rank", str(scenario_path), "--top", "2"])
    assert result.exit_code == 0, result.output
    assert "alpha" in result.output
    assert "gamma" not in result.output


def test_estimate_and_breakdown(scenario_path):
    runner = CliRunner()
    est = runner.invoke(cli.cli, ["estimate", str(scenario_path), "--host", "beta", "--json-output"])
    assert est.exit_code == 0, est.output
    est_payload = json.loads(est.output)
    assert est_payload["host"] == "beta"
    assert est_payload["interaction_adjustment"] == 1.0

    full = runner.invoke(cli.cli, ["breakdown", str(scenario_path), "--host", "beta", "--json-output"])
    assert full.exit_code == 0, full.output
    full_payload = json.loads(full.output)
    # 50 successes, 50 failures on top of the 30/1 prior.
    assert full_payload["interaction_adjustment"] == pytest.approx((80 / 131) ** 15)
    assert int(full_payload["score"]) < int(est_payload["score"])

    text = runner.invoke(cli.cli, ["breakdown", str(scenario_path), "--host", "1"])
    assert text.exit_code == 0, text.output
    assert "Current score for alpha" in text.output


def test_unknown_host_is_a_clean_error(scenario_path):
    runner = CliRunner()
    result = runner.invoke(cli.cli, ["estimate", str(scenario_path), "--host", "nobody"])
    assert result.exit_code != 0
    assert "not found" in result.output


def test_missing_scenario_is_a_clean_error(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli.cli, ["rank", str(tmp_path / "missing.json")])
    assert result.exit_code != 0
    assert "not found" in result.output


def test_doctor_smoke():
    runner = CliRunner()
    result = runner.invoke(cli.cli, ["doctor"])
    assert result.exit_code == 0, result.output
    assert "All green" in result.output
    assert "standard" in result.output
