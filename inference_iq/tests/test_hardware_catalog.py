"""Tests for the hardware catalog and model presets."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

import json

import pytest

from inference_iq.core import (
    DEFAULT_CATALOG,
    HardwareCatalog,
    HardwareProfile,
    InvalidConfigError,
    UnknownAcceleratorError,
    WorkloadConfig,
    lookup,
    resolve_model_size,
)


def write_catalog(tmp_path, data):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(data))
    return str(path)


def test_builtin_profiles():
    assert DEFAULT_CATALOG.names() == ["A100-80GB", "H100-80GB"]

    a100 = lookup("A100-80GB")
    assert a100.memory_capacity_gb == 80
    assert a100.memory_bandwidth_effective_tbps == 1.3
    assert a100.compute_throughput_effective_tflops == 200

    h100 = lookup("H100-80GB")
    assert h100.memory_bandwidth_effective_tbps == 2.2
    assert h100.compute_throughput_effective_tflops == 630


def test_effective_below_peak():
    for profile in DEFAULT_CATALOG.get_all_profiles():
        assert 0 < profile.bandwidth_efficiency < 1
        assert 0 < profile.compute_efficiency < 1


def test_unknown_accelerator():
    with pytest.raises(UnknownAcceleratorError):
        lookup("V100-16GB")
    with pytest.raises(KeyError):
        DEFAULT_CATALOG.lookup("")
    assert "V100-16GB" not in DEFAULT_CATALOG


def test_profiles_are_read_only():
    with pytest.raises(TypeError):
        DEFAULT_CATALOG.profiles["V100-16GB"] = DEFAULT_CATALOG.lookup("A100-80GB")
    with pytest.raises(AttributeError):
        DEFAULT_CATALOG.lookup("A100-80GB").memory_capacity_gb = 40


def test_duplicate_profiles_rejected():
    profile = HardwareProfile("X", 16, 1, 0.5, 100, 50)
    with pytest.raises(InvalidConfigError):
        HardwareCatalog(profiles=[profile, profile])


def test_load_catalog_file(tmp_path):
    path = write_catalog(tmp_path, {"accelerators": [{
        "name": "L40S-48GB",
        "memory_capacity_gb": 48,
        "memory_bandwidth_tbps": 0.864,
        "memory_bandwidth_effective_tbps": 0.56,
        "compute_throughput_tflops": 362,
        "compute_throughput_effective_tflops": 230,
    }]})
    catalog = HardwareCatalog(path)

    assert catalog.names() == ["L40S-48GB"]
    assert catalog.lookup("L40S-48GB").memory_capacity_gb == 48
    assert "A100-80GB" not in catalog


@pytest.mark.parametrize("data", [
    {},
    {"accelerators": []},
    {"accelerators": [{"name": "X"}]},
    {"accelerators": [{
        "name": "X",
        "memory_capacity_gb": 0,
        "memory_bandwidth_tbps": 1,
        "memory_bandwidth_effective_tbps": 1,
        "compute_throughput_tflops": 1,
        "compute_throughput_effective_tflops": 1,
    }]},
])
def test_malformed_catalog_file(tmp_path, data):
    with pytest.raises(InvalidConfigError):
        HardwareCatalog(write_catalog(tmp_path, data))


def test_catalog_file_not_json(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text("not json")
    with pytest.raises(InvalidConfigError):
        HardwareCatalog(str(path))


@pytest.mark.parametrize("model,expected", [
    ("llama-2-7b", 7),
    ("Llama-2-13B", 13),
    ("meta-llama/Llama-2-70b-hf", 70),
    ("mistralai/Mistral-7B-v0.1", 7),
    ("6.7", 6.7),
    (13, 13),
])
def test_resolve_model_size(model, expected):
    assert resolve_model_size(model) == expected


@pytest.mark.parametrize("model", ["gpt-4", "", "-7", "0", "nan"])
def test_resolve_model_size_invalid(model):
    with pytest.raises(InvalidConfigError):
        resolve_model_size(model)


def test_workload_config_from_dict():
    config = WorkloadConfig.from_dict({"model_params_b": 13, "batch_size": 8})
    assert config.model_params_b == 13
    assert config.batch_size == 8
    assert config.accelerator_type == "A100-80GB"

    with pytest.raises(InvalidConfigError):
        WorkloadConfig.from_dict({"gpu_count": 4})
