"""Loading analysis results and saving rendered graphs."""

import json
from pathlib import Path

from pydantic import ValidationError

from lineagelens.graph.models import RenderGraph
from lineagelens.lineage.models import AnalysisResult


def parse_analysis(content: str) -> AnalysisResult:
    """
    Parse an analysis result from JSON text.

    Accepts either a full result document (``{"statements": [...]}``) or a
    bare list of statement lineage units.

    Args:
        content: JSON text

    Returns:
        Parsed AnalysisResult

    Raises:
        ValueError: If content is invalid JSON or doesn't match the schema
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid analysis JSON: {e}") from e

    if isinstance(data, list):
        data = {"statements": data}

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid analysis result: {e}") from e


def load_analysis(input_path: Path) -> AnalysisResult:
    """
    Load an analysis result from a JSON file.

    Args:
        input_path: Input file path

    Returns:
        Loaded AnalysisResult

    Raises:
        FileNotFoundError: If input file doesn't exist
        ValueError: If file content is invalid JSON or doesn't match schema
    """
    if not input_path.exists():
        raise FileNotFoundError(f"Analysis file not found: {input_path}")

    return parse_analysis(input_path.read_text(encoding="utf-8"))


def save_render_graph(graph: RenderGraph, output_path: Path) -> None:
    """
    Save a RenderGraph to a JSON file.

    Args:
        graph: RenderGraph to save
        output_path: Output file path
    """
    output_path.write_text(
        graph.model_dump_json(indent=2, exclude_none=True),
        encoding="utf-8",
    )
