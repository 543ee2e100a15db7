"""CLI entry point for lineagelens."""

import json
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table

from lineagelens.global_models import TraversalDirection, ViewMode
from lineagelens.graph.models import (
    NamespaceFilterState,
    RenderGraph,
    TableFilter,
    ViewOptions,
)
from lineagelens.lineage.models import AnalysisResult, StatementLineageUnit
from lineagelens.lineage.serialization import load_analysis, save_render_graph
from lineagelens.utils.config import ConfigSettings, load_config

app = typer.Typer(
    name="lineagelens",
    help="Build renderable lineage graphs and trace impact from SQL lineage analyses.",
    invoke_without_command=False,
)
console = Console()
err_console = Console(stderr=True)

OUTPUT_FORMATS = ["text", "json", "csv"]


def _resolve_view_mode(view: Optional[str], config: ConfigSettings) -> ViewMode:
    """Resolve the view mode from the CLI flag, then config, then default."""
    if view is None:
        return config.view_mode or ViewMode.TABLE
    try:
        return ViewMode(view.lower())
    except ValueError:
        err_console.print(
            f"[red]Error:[/red] Invalid view '{view}'. "
            f"Use one of: {', '.join(mode.value for mode in ViewMode)}."
        )
        raise typer.Exit(1)


def _resolve_direction(direction: str) -> TraversalDirection:
    try:
        return TraversalDirection(direction.lower())
    except ValueError:
        err_console.print(
            f"[red]Error:[/red] Invalid direction '{direction}'. "
            "Use 'upstream', 'downstream', or 'both'."
        )
        raise typer.Exit(1)


def _resolve_output_format(
    output_format: Optional[str], config: ConfigSettings, allowed: List[str]
) -> str:
    output_format = output_format or config.output_format or "text"
    if output_format not in allowed:
        err_console.print(
            f"[red]Error:[/red] Invalid output format '{output_format}'. "
            f"Use {', '.join(repr(f) for f in allowed)}."
        )
        raise typer.Exit(1)
    return output_format


def _load_units(
    analysis_file: Path, statements: Optional[List[int]]
) -> Tuple[AnalysisResult, List[StatementLineageUnit]]:
    """Load the analysis and select the statements to render."""
    from lineagelens.graph.pipeline import select_statements

    result = load_analysis(analysis_file)
    return result, select_statements(result.statements, statements or None)


def _build_options(
    config: ConfigSettings,
    result: AnalysisResult,
    search: Optional[str] = None,
    selected: Optional[str] = None,
    collapsed: Optional[bool] = None,
    focus: Optional[bool] = None,
    schemas: Optional[List[str]] = None,
    databases: Optional[List[str]] = None,
    tables: Optional[List[str]] = None,
    direction: TraversalDirection = TraversalDirection.BOTH,
    expand: Optional[List[str]] = None,
) -> ViewOptions:
    """Combine CLI flags with config values; CLI flags take precedence."""
    if collapsed is None:
        collapsed = bool(config.default_collapsed)
    if focus is None:
        focus = bool(config.focus_mode)

    return ViewOptions(
        selected_node_id=selected,
        search_term=search or "",
        default_collapsed=collapsed,
        expanded_table_ids=frozenset(expand or []),
        namespace=NamespaceFilterState(
            schemas=frozenset(schemas or config.schemas or []),
            databases=frozenset(databases or config.databases or []),
        ),
        table_filter=TableFilter(
            selected_table_labels=frozenset(tables or []), direction=direction
        ),
        focus_mode=focus,
        resolved_schema=result.resolved_schema,
    )


def _exit_with_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


@app.callback()
def main():
    """lineagelens - SQL lineage graph construction and impact analysis."""
    pass


@app.command()
def render(
    analysis_file: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Path to lineage analysis JSON file",
    ),
    view: Optional[str] = typer.Option(
        None,
        "--view",
        "-m",
        help="View mode: 'table', 'column', 'script' or 'hybrid' (default: table)",
    ),
    statement: Optional[List[int]] = typer.Option(
        None,
        "--statement",
        "-s",
        help="Only render the statement at this position (repeatable)",
    ),
    search: Optional[str] = typer.Option(
        None,
        "--search",
        help="Highlight nodes matching this term",
    ),
    selected: Optional[str] = typer.Option(
        None,
        "--select",
        help="Mark this node id as selected",
    ),
    collapsed: Optional[bool] = typer.Option(
        None,
        "--collapsed/--expanded",
        help="Default collapse state of table nodes (default: expanded)",
    ),
    focus: Optional[bool] = typer.Option(
        None,
        "--focus/--no-focus",
        help="Only keep the lineage of search matches",
    ),
    schema: Optional[List[str]] = typer.Option(
        None,
        "--schema",
        help="Only keep tables in this schema (repeatable)",
    ),
    database: Optional[List[str]] = typer.Option(
        None,
        "--database",
        help="Only keep tables in this database (repeatable)",
    ),
    table: Optional[List[str]] = typer.Option(
        None,
        "--table",
        "-t",
        help="Only keep elements connected to this table label (repeatable)",
    ),
    direction: str = typer.Option(
        "both",
        "--direction",
        "-d",
        help="Direction for --table: 'upstream', 'downstream', or 'both'",
    ),
    expand: Optional[List[str]] = typer.Option(
        None,
        "--expand",
        help="Show all schema columns of this table node id (repeatable)",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--output-format",
        "-f",
        help="Output format: 'text' or 'json' (default: text, or from config)",
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the graph JSON to this file",
    ),
) -> None:
    """
    Render a lineage view as a node/edge graph.

    Configuration can be set in lineagelens.toml in the current directory.
    CLI arguments override configuration file values.

    Examples:

        # Table-level graph of all statements
        lineagelens render analysis.json

        # Column-level graph of the first statement as JSON
        lineagelens render analysis.json --view column -s 0 -f json

        # Script graph scoped to the analytics schema, saved to a file
        lineagelens render analysis.json --view script --schema analytics -o graph.json
    """
    from lineagelens.graph.pipeline import render_view

    config = load_config()
    view_mode = _resolve_view_mode(view, config)
    table_direction = _resolve_direction(direction)
    output_format = _resolve_output_format(output_format, config, ["text", "json"])

    try:
        result, units = _load_units(analysis_file, statement)
        options = _build_options(
            config,
            result,
            search=search,
            selected=selected,
            collapsed=collapsed,
            focus=focus,
            schemas=schema,
            databases=database,
            tables=table,
            direction=table_direction,
            expand=expand,
        )
        graph = render_view(units, view_mode, options)

        if output_file:
            save_render_graph(graph, output_file)
            console.print(
                f"[green]Success:[/green] Graph saved to {output_file} "
                f"({len(graph.nodes)} nodes, {len(graph.edges)} edges)"
            )
        elif output_format == "json":
            print(graph.model_dump_json(indent=2, exclude_none=True))
        else:
            _format_graph_text(graph, view_mode)

    except FileNotFoundError as e:
        _exit_with_error(str(e))

    except ValueError as e:
        _exit_with_error(str(e))

    except Exception as e:
        _exit_with_error(f"Unexpected error: {e}")


@app.command()
def impact(
    analysis_file: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Path to lineage analysis JSON file",
    ),
    element_id: str = typer.Argument(
        ...,
        help="Node, column or edge id to trace from",
    ),
    view: Optional[str] = typer.Option(
        None,
        "--view",
        "-m",
        help="View mode the ids belong to (default: table, or from config)",
    ),
    direction: str = typer.Option(
        "both",
        "--direction",
        "-d",
        help="Trace direction: 'upstream', 'downstream', or 'both'",
    ),
    statement: Optional[List[int]] = typer.Option(
        None,
        "--statement",
        "-s",
        help="Only use the statement at this position (repeatable)",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--output-format",
        "-f",
        help="Output format: 'text', 'json', or 'csv' (default: text, or from config)",
    ),
) -> None:
    """
    Trace everything upstream and/or downstream of an element.

    Examples:

        # Everything connected to a table
        lineagelens impact analysis.json table:orders

        # Columns affected by a source column
        lineagelens impact analysis.json column:orders.id --view column -d downstream
    """
    from lineagelens.graph.pipeline import render_view
    from lineagelens.graph.traversal import ImpactTraversal

    config = load_config()
    view_mode = _resolve_view_mode(view, config)
    trace_direction = _resolve_direction(direction)
    output_format = _resolve_output_format(output_format, config, OUTPUT_FORMATS)

    try:
        result, units = _load_units(analysis_file, statement)
        graph = render_view(units, view_mode, _build_options(config, result))
        impact_result = ImpactTraversal(graph).trace(element_id, trace_direction)

        if output_format == "text":
            _format_impact_text(impact_result)
        elif output_format == "json":
            print(impact_result.model_dump_json(indent=2))
        else:  # csv
            _format_impact_csv(impact_result)

    except FileNotFoundError as e:
        _exit_with_error(str(e))

    except ValueError as e:
        _exit_with_error(str(e))

    except Exception as e:
        _exit_with_error(f"Unexpected error: {e}")


@app.command()
def search(
    analysis_file: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Path to lineage analysis JSON file",
    ),
    term: str = typer.Argument(..., help="Case-insensitive search term"),
    view: Optional[str] = typer.Option(
        None,
        "--view",
        "-m",
        help="View mode to search in (default: table, or from config)",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--output-format",
        "-f",
        help="Output format: 'text' or 'json' (default: text, or from config)",
    ),
) -> None:
    """
    List the element ids matching a search term.

    Examples:

        lineagelens search analysis.json customer --view column
    """
    from lineagelens.graph.pipeline import render_view
    from lineagelens.graph.search import find_search_match_ids

    config = load_config()
    view_mode = _resolve_view_mode(view, config)
    output_format = _resolve_output_format(output_format, config, ["text", "json"])

    try:
        result, units = _load_units(analysis_file, None)
        graph = render_view(units, view_mode, _build_options(config, result))
        matches = sorted(find_search_match_ids(term, graph.nodes, view_mode))

        if output_format == "json":
            output = {"term": term, "view": view_mode.value, "matches": matches}
            print(json.dumps(output, indent=2))
        elif not matches:
            console.print(f"[yellow]No matches found for '{term}'[/yellow]")
        else:
            for match in matches:
                console.print(match)
            console.print(f"\n[dim]Total: {len(matches)} match(es)[/dim]")

    except FileNotFoundError as e:
        _exit_with_error(str(e))

    except ValueError as e:
        _exit_with_error(str(e))

    except Exception as e:
        _exit_with_error(f"Unexpected error: {e}")


@app.command()
def namespaces(
    analysis_file: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Path to lineage analysis JSON file",
    ),
    view: Optional[str] = typer.Option(
        None,
        "--view",
        "-m",
        help="View mode to inspect (default: table, or from config)",
    ),
) -> None:
    """
    List the schemas and databases available for filtering.

    Examples:

        lineagelens namespaces analysis.json
    """
    from lineagelens.graph.namespace import collect_namespaces
    from lineagelens.graph.pipeline import build_view

    config = load_config()
    view_mode = _resolve_view_mode(view, config)

    try:
        result, units = _load_units(analysis_file, None)
        graph = build_view(units, view_mode, _build_options(config, result))
        schemas, databases = collect_namespaces(graph)

        table = Table(title="Namespaces")
        table.add_column("Kind", style="cyan")
        table.add_column("Name", style="green")
        for name in databases:
            table.add_row("database", name)
        for name in schemas:
            table.add_row("schema", name)

        if not schemas and not databases:
            console.print("[yellow]No namespaces found[/yellow]")
        else:
            console.print(table)

    except FileNotFoundError as e:
        _exit_with_error(str(e))

    except ValueError as e:
        _exit_with_error(str(e))

    except Exception as e:
        _exit_with_error(f"Unexpected error: {e}")


def _format_graph_text(graph: RenderGraph, view_mode: ViewMode) -> None:
    """Format a rendered graph as text tables."""
    if not graph.nodes:
        console.print("[yellow]Graph is empty[/yellow]")
        return

    node_table = Table(title=f"Nodes ({view_mode.value} view)")
    node_table.add_column("Id", style="cyan")
    node_table.add_column("Type", style="green")
    node_table.add_column("Label", style="magenta")
    node_table.add_column("Columns", justify="right", style="yellow")
    for node in graph.nodes:
        data = node.table_data
        kind = data.node_type if data else node.type
        columns = str(len(data.columns)) if data else ""
        node_table.add_row(node.id, kind, node.data.label, columns)
    console.print(node_table)

    if graph.edges:
        edge_table = Table(title="Edges")
        edge_table.add_column("Source", style="cyan")
        edge_table.add_column("Target", style="green")
        edge_table.add_column("Label", style="dim")
        for edge in graph.edges:
            edge_table.add_row(
                edge.source_element, edge.target_element, edge.label or ""
            )
        console.print(edge_table)

    console.print(
        f"\n[dim]Total: {len(graph.nodes)} node(s), {len(graph.edges)} edge(s)[/dim]"
    )


def _format_impact_text(result) -> None:
    """Format impact result as text table."""
    table = Table(title=f"Impact of '{result.start_id}'")
    table.add_column("Element", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Direction", style="magenta")
    table.add_column("Hops", style="yellow", justify="right")

    for element in result.elements:
        table.add_row(
            element.id, element.element_type, element.direction.value, str(element.hops)
        )

    if len(result) == 0:
        console.print(f"[yellow]Nothing connected to '{result.start_id}'[/yellow]")
    else:
        console.print(table)
        console.print(f"\n[dim]Total: {len(result)} element(s)[/dim]")


def _format_impact_csv(result) -> None:
    """Format impact result as CSV."""
    print("id,element_type,direction,hops")
    for element in result.elements:
        element_id = element.id.replace('"', '""')
        print(
            f'"{element_id}",{element.element_type},'
            f"{element.direction.value},{element.hops}"
        )


if __name__ == "__main__":
    app()
