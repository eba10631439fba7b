import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
import yaml
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import CONFIG_FILENAME, load_settings, write_default_settings
from .context import RuntimeContext
from .exceptions import SitegraphError
from .generator import available_templates, generate_graph_from_template, save_graph_yaml
from .validator import validate_graph_from_file
from .visualize import ascii_plan

app = typer.Typer(no_args_is_help=True, help="Sitegraph CLI: node graphs that drive site elements")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging.")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _parse_value(raw: str) -> Any:
    # YAML scalars give typed values: 3 -> int, true -> bool; anything else stays text
    if not raw:
        return ""
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    if value is None and raw.strip() not in ("null", "~"):
        return raw
    return value


def _parse_overrides(pairs: List[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for pair in pairs:
        node_id, sep, raw = pair.partition("=")
        if not sep or not node_id:
            raise typer.BadParameter(f"expected NODE=VALUE, got '{pair}'", param_hint="--set")
        overrides[node_id] = _parse_value(raw)
    return overrides


@app.command()
def init():
    """Create a local project layout (graphs/, dist/) and a sitegraph.yaml."""
    settings = load_settings()
    for folder in [settings.graphs_dir, settings.export_dir]:
        Path(folder).mkdir(exist_ok=True, parents=True)
    if not Path(CONFIG_FILENAME).exists():
        write_default_settings(Path.cwd())
    rprint(Panel.fit(
        f"[bold green]Initialized[/] directories: {settings.graphs_dir}/, {settings.export_dir}/ and {CONFIG_FILENAME}"
    ))


@app.command()
def templates():
    """List the starter graph templates."""
    for name in available_templates():
        print(name)


@app.command()
def new(template: str = typer.Option("blank", help="Starter template (see `sitegraph templates`)."),
        name: str = typer.Option("graph", help="Output filename (without .yaml)"),
        outdir: Optional[Path] = typer.Option(None, help="Where to place the YAML (default: graphs_dir)"),
    ):
    """Create a graph YAML from a starter template."""
    try:
        graph = generate_graph_from_template(template, name=name)
    except SitegraphError as e:
        rprint(f"[bold red]{e}[/]")
        raise typer.Exit(code=2)
    outdir = outdir or load_settings().graphs_dir
    outdir.mkdir(exist_ok=True, parents=True)
    outfile = outdir / f"{name}.yaml"
    save_graph_yaml(graph, outfile)
    rprint(Panel.fit(f"Saved template [bold]{template}[/] to [cyan]{outfile}[/]"))


@app.command()
def validate(file: Path):
    """Validate a graph file (ids, sockets, dangling connections, cycles)."""
    try:
        ok, messages = validate_graph_from_file(file)
    except SitegraphError as e:
        rprint(f"[bold red]{e}[/]")
        raise typer.Exit(code=2)
    table = Table(title="Validation Report", show_lines=True)
    table.add_column("Status", justify="center", style="bold")
    table.add_column("Message")
    for m in messages:
        status = m.split(":", 1)[0]
        table.add_row(status, m)
    rprint(table)
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def explain(file: Path):
    """Print an ASCII plan of the graph."""
    print(ascii_plan(file))


@app.command()
def run(file: Path,
        hover: bool = typer.Option(False, help="Evaluate with the element hovered."),
        click: bool = typer.Option(False, help="Evaluate with the click toggle on."),
        time: float = typer.Option(0.0, help="Seconds since start for the first tick."),
        ticks: int = typer.Option(1, min=1, help="Number of ticks to evaluate."),
        dt: float = typer.Option(1 / 60, help="Seconds between ticks."),
        set_: List[str] = typer.Option([], "--set", help="Override a node value: NODE=VALUE (repeatable)."),
        seed: Optional[int] = typer.Option(None, help="Seed for Random nodes (default: from sitegraph.yaml)."),
    ):
    """Evaluate the graph for one or more ticks and print style, content and effects."""
    from .runner import run_graph

    overrides = _parse_overrides(set_)
    contexts = [RuntimeContext(is_hovered=hover, is_clicked=click, time=time + i * dt) for i in range(ticks)]
    if seed is None:
        seed = load_settings().seed
    try:
        results = run_graph(file, overrides=overrides, contexts=contexts, seed=seed)
    except SitegraphError as e:
        rprint(f"[bold red]{e}[/]")
        raise typer.Exit(code=2)

    table = Table(title=f"Evaluation of {file.name}", show_lines=True)
    table.add_column("Tick", justify="right")
    table.add_column("t (s)", justify="right")
    table.add_column("Style")
    table.add_column("Content")
    table.add_column("Effects")
    for i, (ctx, res) in enumerate(zip(contexts, results)):
        style = "\n".join(f"{k}: {v}" for k, v in res.style.items())
        effects = "\n".join(f"{e.kind} {e.payload!r} ({e.node_id})" for e in res.effects)
        table.add_row(str(i), f"{ctx.time:.3f}", escape(style), escape(res.content), escape(effects))
    rprint(table)


@app.command()
def export(project_file: Path,
           output: Optional[Path] = typer.Option(None, "--output", "-o", help="HTML file to write (default: export_dir/<name>.html)"),
           title: Optional[str] = typer.Option(None, help="Document title (default: project name)."),
    ):
    """Export a project file to a standalone HTML document."""
    from .exporter import generate_html
    from .storage import load_project

    settings = load_settings()
    try:
        project = load_project(project_file)
    except SitegraphError as e:
        rprint(f"[bold red]{e}[/]")
        raise typer.Exit(code=2)
    export_settings = settings.export.model_copy(update={"title": title}) if title else settings.export
    output = output or settings.export_dir / f"{project_file.stem}.html"
    output.parent.mkdir(exist_ok=True, parents=True)
    output.write_text(generate_html(project, export_settings), encoding="utf-8")
    rprint(Panel.fit(f"Exported [bold]{project.name}[/] to [cyan]{output}[/]"))


if __name__ == "__main__":
    app()
