"""Tests for the command-line interface."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

import json

import pytest
from click.testing import CliRunner

from inference_iq.cli.main import cli, format_cost
from inference_iq.core import advisories, estimate, WorkloadConfig


@pytest.fixture
def runner():
    return CliRunner()


def test_estimate_table_defaults(runner):
    result = runner.invoke(cli, ["estimate"])
    assert result.exit_code == 0, result.output
    assert "Model weights:      140.0 GB" in result.output
    assert "Utilization:        88.0%" in result.output
    assert "Max batch size:     24" in result.output
    assert "vs GPT-3.5 Turbo" in result.output
    assert "Increase batch size to 24" in result.output


def test_estimate_json(runner):
    result = runner.invoke(cli, [
        "estimate", "--model", "llama-2-13b", "--accelerator", "H100-80GB",
        "--num-accelerators", "1", "--precision", "8", "--output-format", "json",
    ])
    assert result.exit_code == 0, result.output

    data = json.loads(result.output)
    assert data["config"]["model_params_b"] == 13
    assert data["config"]["precision_bits"] == 8
    assert data["estimate"]["weights_memory_gb"] == 13
    assert data["estimate"]["aggregate_memory_gb"] == 80
    assert {a["code"] for a in data["advisories"]} >= {"prefill_cheaper", "batch_below_optimal"}


def test_estimate_config_file(runner, tmp_path):
    path = tmp_path / "workload.json"
    path.write_text(json.dumps({"model_params_b": 7, "batch_size": 4}))

    result = runner.invoke(cli, [
        "estimate", "--config-file", str(path), "--batch-size", "8", "--output-format", "json",
    ])
    assert result.exit_code == 0, result.output

    config = json.loads(result.output)["config"]
    assert config["model_params_b"] == 7
    assert config["batch_size"] == 8


@pytest.mark.parametrize("fields, message", [
    ({"num_accelerators": 16}, "num_accelerators"),
    ({"batch_size": 500}, "batch_size"),
    ({"sequence_length": 1000}, "multiple of 256"),
])
def test_config_file_held_to_form_ranges(runner, tmp_path, fields, message):
    path = tmp_path / "workload.json"
    path.write_text(json.dumps(fields))

    result = runner.invoke(cli, ["estimate", "--config-file", str(path)])
    assert result.exit_code == 1
    assert message in result.output


def test_estimate_bad_config_file(runner, tmp_path):
    path = tmp_path / "workload.json"
    path.write_text(json.dumps({"gpus": 4}))

    result = runner.invoke(cli, ["estimate", "--config-file", str(path)])
    assert result.exit_code == 1
    assert "Unknown workload config field" in result.output


def test_estimate_unknown_accelerator(runner):
    result = runner.invoke(cli, ["estimate", "--accelerator", "TPU-v5"])
    assert result.exit_code == 1
    assert "Unknown accelerator type" in result.output


@pytest.mark.parametrize("args", [
    ["--num-accelerators", "9"],
    ["--batch-size", "0"],
    ["--batch-size", "129"],
    ["--sequence-length", "300"],
    ["--sequence-length", "16384"],
    ["--precision", "4"],
    ["--cost-per-hour", "-1"],
])
def test_estimate_rejects_out_of_range(runner, args):
    result = runner.invoke(cli, ["estimate"] + args)
    assert result.exit_code == 2


def test_hardware_ls(runner):
    result = runner.invoke(cli, ["hardware-ls"])
    assert result.exit_code == 0, result.output
    assert "A100-80GB" in result.output
    assert "H100-80GB" in result.output

    result = runner.invoke(cli, ["hardware-ls", "--output-format", "json"])
    names = [p["name"] for p in json.loads(result.output)]
    assert names == ["A100-80GB", "H100-80GB"]


def test_sweep_batch_size(runner):
    result = runner.invoke(cli, [
        "sweep", "--field", "batch-size", "--values", "1,8,32", "--output-format", "json",
    ])
    assert result.exit_code == 0, result.output

    rows = json.loads(result.output)
    assert [r["batch_size"] for r in rows] == [1, 8, 32]
    decode_rates = [r["decode_tokens_per_s"] for r in rows]
    assert decode_rates == sorted(decode_rates)


def test_sweep_invalid_value(runner):
    result = runner.invoke(cli, ["sweep", "--field", "num-accelerators", "--values", "1,0"])
    assert result.exit_code == 1
    assert "num_accelerators: 0 is not in the range" in result.output


@pytest.mark.parametrize("field, values", [
    ("num-accelerators", "64"),
    ("batch-size", "8,256"),
    ("sequence-length", "300"),
    ("sequence-length", "16384"),
])
def test_sweep_holds_values_to_form_ranges(runner, field, values):
    result = runner.invoke(cli, ["sweep", "--field", field, "--values", values])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_sweep_table(runner):
    result = runner.invoke(cli, ["sweep", "--field", "sequence-length", "--values", "1024,4096"])
    assert result.exit_code == 0, result.output
    assert "sequence-length" in result.output
    assert len(result.output.strip().splitlines()) == 4


def test_format_cost():
    assert format_cost(0.0004297) == "$0.000430"
    assert format_cost(0.005) == "$0.00500"
    assert format_cost(0.0661) == "$0.0661"


def test_high_memory_advisory():
    config = WorkloadConfig(num_accelerators=1)
    codes = [a.code for a in advisories(config, estimate(config))]
    assert "high_memory_utilization" in codes
    assert "batch_below_optimal" not in codes


def test_advisory_order_and_messages():
    config = WorkloadConfig()
    notes = advisories(config, estimate(config))
    assert [n.code for n in notes] == [
        "prefill_cheaper", "decode_more_expensive", "batch_below_optimal",
    ]
    assert notes[1].message == "More expensive than GPT-3.5 Turbo for completions"
    assert notes[1].severity == "warning"
