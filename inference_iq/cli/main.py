"""CLI interface for the inference estimator."""

import json
import logging
import sys
from typing import Any, Dict, List, Optional

import click

from ..core.exceptions import InferenceIQError, InvalidConfigError
from ..core.hardware_catalog import DEFAULT_CATALOG, HardwareCatalog
from ..core.model_profiler import MODEL_PRESETS, resolve_model_size
from ..core.estimator import InferenceEstimator
from ..core.recommendations import advisories
from ..core.types import SUPPORTED_PRECISIONS, Advisory, InferenceEstimate, WorkloadConfig

logger = logging.getLogger(__name__)

SEQUENCE_LENGTH_STEP = 256

SWEEP_FIELDS = {
    "batch-size": "batch_size",
    "sequence-length": "sequence_length",
    "num-accelerators": "num_accelerators",
}

# Ranges offered by the interactive form; command-line options, config files
# and sweep values are all held to them
FORM_RANGES = {
    "num_accelerators": click.IntRange(1, 8),
    "batch_size": click.IntRange(1, 128),
    "sequence_length": click.IntRange(256, 8192),
}


def format_cost(value: float) -> str:
    """Format cost value."""
    if value < 0.001:
        return f"${value:.6f}"
    elif value < 0.01:
        return f"${value:.5f}"
    else:
        return f"${value:.4f}"


def format_batch(value: Optional[int]) -> str:
    if value is None:
        return "∞"
    return str(value)


def _check_sequence_step(ctx, param, value):
    if value is not None and value % SEQUENCE_LENGTH_STEP != 0:
        raise click.BadParameter(f"must be a multiple of {SEQUENCE_LENGTH_STEP}")
    return value


def check_form_ranges(config: WorkloadConfig) -> None:
    """Hold a config to the form ranges and the sequence length step.

    Raises:
        InvalidConfigError: naming the first field out of range.
    """
    for attr, param_type in FORM_RANGES.items():
        value = getattr(config, attr)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidConfigError(f"{attr} must be an integer, got {value!r}")
        try:
            param_type.convert(value, None, None)
        except click.BadParameter as e:
            raise InvalidConfigError(f"{attr}: {e.message}") from None
    if config.sequence_length % SEQUENCE_LENGTH_STEP != 0:
        raise InvalidConfigError(
            f"sequence_length must be a multiple of {SEQUENCE_LENGTH_STEP}, got {config.sequence_length}"
        )


def load_catalog(catalog_path: Optional[str]) -> HardwareCatalog:
    if catalog_path is None:
        return DEFAULT_CATALOG
    return HardwareCatalog(catalog_path)


def load_config_file(config_path: Optional[str]) -> WorkloadConfig:
    """Read a workload config from JSON, or return the defaults."""
    if config_path is None:
        return WorkloadConfig()
    with open(config_path, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidConfigError(f"Config {config_path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidConfigError(f"Config {config_path} must contain a JSON object")
    logger.debug("Loaded workload config from %s: %s", config_path, data)
    return WorkloadConfig.from_dict(data)


def build_config(base: WorkloadConfig, model: Optional[str], overrides: Dict[str, Any]) -> WorkloadConfig:
    """Apply command-line values on top of a base config."""
    changes = {k: v for k, v in overrides.items() if v is not None}
    if model is not None:
        changes["model_params_b"] = resolve_model_size(model)
    return base.replace(**changes)


def print_report(config: WorkloadConfig, result: InferenceEstimate, notes: List[Advisory]):
    """Print the estimate as a text report."""
    gpu_label = f"{config.accelerator_type} x {config.num_accelerators}"

    click.echo("=" * 60)
    click.echo("INFERENCE ESTIMATE")
    click.echo("=" * 60)
    click.echo(f"Model: {config.model_params_b:g}B params @ {config.precision_bits}-bit")
    click.echo(f"Hardware: {gpu_label} at {format_cost(config.accelerator_cost_per_hour)}/hr each")
    click.echo(f"Batch size: {config.batch_size}, sequence length: {config.sequence_length}")
    click.echo(f"Tokens: {config.prompt_tokens} prompt, {config.completion_tokens} completion")

    click.echo("\nMemory Usage")
    click.echo("-" * 60)
    click.echo(f"  Model weights:      {result.weights_memory_gb:.1f} GB")
    click.echo(f"  KV cache:           {result.kv_cache_memory_gb:.2f} GB")
    click.echo(f"  Total:              {result.total_memory_gb:.1f} GB "
               f"of {result.aggregate_memory_gb:.0f} GB")
    click.echo(f"  Utilization:        {result.memory_utilization_pct:.1f}%")

    click.echo("\nPerformance")
    click.echo("-" * 60)
    click.echo(f"  Prompt processing:  {result.prefill_tokens_per_s:.0f} tok/s")
    click.echo(f"  Token generation:   {result.decode_tokens_per_s:.1f} tok/s")
    click.echo(f"  Prompt latency:     {result.prefill_time_s * 1000:.0f} ms")
    click.echo(f"  Completion time:    {result.decode_time_s:.2f} s")
    click.echo(f"  Total time:         {result.total_time_s:.2f} s")

    click.echo("\nCost Analysis")
    click.echo("-" * 60)
    click.echo(f"  Prompt cost:        {format_cost(result.prefill_cost_per_1k)}/1k tok")
    click.echo(f"  Completion cost:    {format_cost(result.decode_cost_per_1k)}/1k tok")
    click.echo(f"  Request cost:       {format_cost(result.total_cost)}")
    click.echo(f"  Max batch size:     {format_batch(result.max_batch_size)}")
    click.echo(f"  Optimal batch size: {result.optimal_batch_size}")

    click.echo(f"\nvs {result.reference.name}")
    click.echo("-" * 60)
    click.echo(f"  Prompt savings:     {result.prefill_savings_pct:+.1f}%")
    click.echo(f"  Completion savings: {result.decode_savings_pct:+.1f}%")

    if notes:
        click.echo("\nRecommendations")
        click.echo("-" * 60)
        for note in notes:
            marker = "⚠" if note.severity == "warning" else "✓"
            click.echo(f"  {marker} {note.message}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Inference memory, latency and cost estimator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def workload_options(func):
    """Options shared by commands that build a WorkloadConfig."""
    options = [
        click.option("--config-file", type=click.Path(exists=True, dir_okay=False),
                     help="JSON file with workload config fields"),
        click.option("--catalog", "catalog_path", type=click.Path(exists=True, dir_okay=False),
                     help="JSON hardware catalog (defaults to built-in profiles)"),
        click.option("--model", help=f"Model preset ({', '.join(MODEL_PRESETS)}) or size in billions"),
        click.option("--accelerator", "accelerator_type", help="Accelerator type from catalog"),
        click.option("--num-accelerators", type=FORM_RANGES["num_accelerators"]),
        click.option("--batch-size", type=FORM_RANGES["batch_size"]),
        click.option("--sequence-length", type=FORM_RANGES["sequence_length"], callback=_check_sequence_step),
        click.option("--precision", "precision_bits",
                     type=click.Choice([str(p) for p in SUPPORTED_PRECISIONS])),
        click.option("--cost-per-hour", "accelerator_cost_per_hour", type=click.FloatRange(min=0),
                     help="Rental cost per accelerator per hour (USD)"),
        click.option("--prompt-tokens", type=click.IntRange(min=1)),
        click.option("--completion-tokens", type=click.IntRange(min=1)),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _prepare(config_file, catalog_path, model, overrides):
    if overrides.get("precision_bits") is not None:
        overrides["precision_bits"] = int(overrides["precision_bits"])
    config = build_config(load_config_file(config_file), model, overrides)
    check_form_ranges(config)
    return config, InferenceEstimator(load_catalog(catalog_path))


# ---------- estimate ---------------------------------------------------
@cli.command("estimate")
@workload_options
@click.option("--output-format", type=click.Choice(["table", "json"]), default="table")
def estimate_cmd(config_file, catalog_path, model, output_format, **overrides):
    """Estimate memory, latency and cost for one configuration."""
    try:
        config, estimator = _prepare(config_file, catalog_path, model, overrides)
        result = estimator.estimate(config)
    except InferenceIQError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    notes = advisories(config, result)
    if output_format == "json":
        output = {
            "config": config.to_dict(),
            "estimate": result.to_dict(),
            "advisories": [n.to_dict() for n in notes],
        }
        click.echo(json.dumps(output, indent=2))
    else:
        print_report(config, result, notes)


# ---------- hardware-ls ------------------------------------------------
@cli.command("hardware-ls")
@click.option("--catalog", "catalog_path", type=click.Path(exists=True, dir_okay=False),
              help="JSON hardware catalog (defaults to built-in profiles)")
@click.option("--output-format", type=click.Choice(["table", "json"]), default="table")
def hardware_ls_cmd(catalog_path, output_format):
    """List accelerator profiles with peak and effective figures."""
    try:
        catalog = load_catalog(catalog_path)
    except InferenceIQError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    profiles = catalog.get_all_profiles()
    if output_format == "json":
        click.echo(json.dumps([p.to_dict() for p in profiles], indent=2))
        return

    header = (f"{'Accelerator':<14} {'Mem(GB)':<8} {'BW(TB/s)':<10} {'BW eff':<8} "
              f"{'TFLOPs':<8} {'TFLOPs eff':<11} {'MFU':<6}")
    click.echo(header)
    click.echo("-" * len(header))
    for p in profiles:
        click.echo(
            f"{p.name:<14} {p.memory_capacity_gb:<8g} {p.memory_bandwidth_tbps:<10g} "
            f"{p.memory_bandwidth_effective_tbps:<8g} {p.compute_throughput_tflops:<8g} "
            f"{p.compute_throughput_effective_tflops:<11g} {p.compute_efficiency:<6.0%}"
        )


# ---------- sweep ------------------------------------------------------
@cli.command("sweep")
@workload_options
@click.option("--field", "sweep_field", required=True, type=click.Choice(list(SWEEP_FIELDS)),
              help="Config field to vary")
@click.option("--values", "values_str", required=True, help="Comma-separated values, e.g. 1,8,32")
@click.option("--output-format", type=click.Choice(["table", "json"]), default="table")
def sweep_cmd(config_file, catalog_path, model, sweep_field, values_str, output_format, **overrides):
    """Recompute the estimate for each value of one field."""
    try:
        values = [int(v) for v in values_str.split(",") if v.strip()]
    except ValueError:
        click.echo(f"Error: --values must be comma-separated integers, got {values_str!r}", err=True)
        sys.exit(1)

    attr = SWEEP_FIELDS[sweep_field]
    rows = []
    try:
        base, estimator = _prepare(config_file, catalog_path, model, overrides)
        for value in values:
            config = base.replace(**{attr: value})
            check_form_ranges(config)
            rows.append((value, estimator.estimate(config)))
    except InferenceIQError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps(
            [{attr: value, **result.to_dict()} for value, result in rows], indent=2
        ))
        return

    header = (f"{sweep_field:<17} {'Mem%':<8} {'Prefill tok/s':<14} {'Decode tok/s':<13} "
              f"{'Total(s)':<9} {'$/1k in':<10} {'$/1k out':<10} {'MaxBatch':<8}")
    click.echo(header)
    click.echo("-" * len(header))
    for value, r in rows:
        click.echo(
            f"{value:<17} {r.memory_utilization_pct:<8.1f} {r.prefill_tokens_per_s:<14.0f} "
            f"{r.decode_tokens_per_s:<13.1f} {r.total_time_s:<9.2f} "
            f"{format_cost(r.prefill_cost_per_1k):<10} {format_cost(r.decode_cost_per_1k):<10} "
            f"{format_batch(r.max_batch_size):<8}"
        )


def main():
    cli()


if __name__ == "__main__":
    main()
