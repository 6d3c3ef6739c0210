from pathlib import Path
import logging
import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from typing import Optional

from .config import get_settings
from .document import Document
from .errors import DxtError
from .generator import TEMPLATES, generate_diagram_from_template, save_diagram_json
from .persistence import read_diagram, read_palette, safe_filename, write_palette
from .validator import validate_diagram_file, validate_palette_file
from .visualize import ascii_outline

app = typer.Typer(no_args_is_help=True, help="DxT CLI — dataflow diagrams and node palettes")


def _fail(err: DxtError):
    rprint(Panel.fit(str(err), title=f"[bold red]{type(err).__name__}[/]", border_style="red"))
    raise typer.Exit(code=1)


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, help="Logging level (default from DXT_LOG_LEVEL).")):
    level = (log_level or get_settings().log_level).upper()
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=[RichHandler(show_path=False)], force=True)


@app.command()
def new(template: str = typer.Option("blank", help=f"Template to use: {' | '.join(TEMPLATES)}"),
        name: Optional[str] = typer.Option(None, help="Diagram name (default: the template's)."),
        outdir: Path = typer.Option(Path("."), help="Where to place the JSON"),
    ):
    """Create a starter diagram from a bundled template."""
    try:
        diagram = generate_diagram_from_template(template, name=name)
    except ValueError as e:
        rprint(f"[red]{e}[/]")
        raise typer.Exit(code=1)
    outdir.mkdir(exist_ok=True, parents=True)
    outfile = save_diagram_json(diagram, outdir / safe_filename(diagram.name), indent=get_settings().json_indent)
    rprint(Panel.fit(f"Saved template [bold]{template}[/] to [cyan]{outfile}[/]"))


@app.command()
def validate(file: Path,
             palette: bool = typer.Option(False, "--palette", help="Treat FILE as a palette file."),
    ):
    """Validate a diagram (or palette) file: schema, ids, wire references."""
    ok, messages = validate_palette_file(file) if palette else validate_diagram_file(file)
    table = Table(title="Validation Report", show_lines=True)
    table.add_column("Status", justify="center", style="bold")
    table.add_column("Message")
    for m in messages:
        status = "OK" if m.startswith("OK:") else "ERR"
        table.add_row(status, m[len(status) + 1:].strip())
    rprint(table)
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def explain(file: Path):
    """Print the nodes and wires of a diagram."""
    try:
        diagram = read_diagram(file)
    except DxtError as e:
        _fail(e)
    print(ascii_outline(diagram))


@app.command("import-palette")
def import_palette(diagram_file: Path, palette_file: Path):
    """Add a palette file's node types to a diagram, renaming clashes."""
    doc = Document()
    try:
        doc.load(diagram_file)
        added = doc.import_palette(read_palette(palette_file))
    except DxtError as e:
        _fail(e)
    diagram_file.write_text(doc.to_json(), encoding="utf-8")
    table = Table(title=f"Imported into {doc.name}")
    table.add_column("Name", style="bold")
    table.add_column("Inputs")
    table.add_column("Outputs")
    for d in added:
        table.add_row(d.name, ", ".join(d.inputs) or "none", ", ".join(d.outputs) or "none")
    rprint(table)


@app.command("export-palette")
def export_palette(diagram_file: Path, out: Path):
    """Write a diagram's custom node types to a palette file."""
    try:
        diagram = read_diagram(diagram_file)
    except DxtError as e:
        _fail(e)
    write_palette(diagram.custom_node_defs, out, indent=get_settings().json_indent)
    rprint(Panel.fit(f"Saved {len(diagram.custom_node_defs)} node type(s) to [cyan]{out}[/]"))


if __name__ == "__main__":
    app()
