"""JSON export of a full pipeline result."""

from pathlib import Path

from chainledger.engines.pipeline import PipelineResult


def export_json(result: PipelineResult) -> str:
    """Decimals (including NaN for unpriced values) serialize as strings."""
    return result.model_dump_json(indent=2)


def write_json(path: Path, result: PipelineResult) -> None:
    path.write_text(export_json(result))
