"""CLI entry point for copyright_sheet."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import List

from pypdf import PdfReader
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.panel import Panel
from rich.table import Table
from rich import box

from copyright_sheet.config import MODES, MODE_AUDIO
from copyright_sheet.errors import CopyrightSheetError, DataError
from copyright_sheet.log import configure_logging
from copyright_sheet.service import CopyrightManager
from copyright_sheet.store import JsonContentStore

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Copyright Sheet – Generate a printable PDF of copyright cards"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Error, Info or Debug (default: $LOG_LEVEL, else Error).",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Build command - render a PDF to a file
    build_cmd = subparsers.add_parser(
        "build",
        help="Render the copyright PDF for a set of product codes"
    )
    build_cmd.add_argument(
        "--content",
        type=str,
        required=True,
        help="Path to the JSON content export (filesets and organizations).",
    )
    build_cmd.add_argument(
        "--product",
        action="append",
        required=True,
        help="Product code to include (repeat for several).",
    )
    build_cmd.add_argument(
        "--mode",
        choices=MODES,
        default=MODE_AUDIO,
        help="Content mode; selects type codes and grid size (default: audio).",
    )
    build_cmd.add_argument(
        "--output",
        type=str,
        default="build/copyright.pdf",
        help="Path to output file (default: build/copyright.pdf).",
    )

    # Serve command - run the HTTP API
    serve_cmd = subparsers.add_parser(
        "serve",
        help="Run the HTTP API"
    )
    serve_cmd.add_argument(
        "--content",
        type=str,
        required=True,
        help="Path to the JSON content export (filesets and organizations).",
    )
    serve_cmd.add_argument("--host", type=str, default="127.0.0.1")
    serve_cmd.add_argument("--port", type=int, default=8000)

    return parser


def get_file_size_str(file_path: Path) -> str:
    """
    Get a human-readable file size string.

    Args:
        file_path: Path to the file

    Returns:
        Size string like "1.5 MB" or "256 KB"
    """
    file_size = file_path.stat().st_size
    if file_size >= 1024 * 1024:
        return f"{file_size / (1024 * 1024):.1f} MB"
    else:
        return f"{file_size / 1024:.1f} KB"


def run_build(content: Path, products: List[str], mode: str, output_path: Path) -> int:
    """Run the build command; returns the exit status."""
    console.print()
    console.print(Panel.fit(
        "[bold magenta]Copyright Sheet[/bold magenta]\n"
        "[dim]Creating printable copyright cards[/dim]",
        border_style="magenta",
    ))
    console.print()

    manager = CopyrightManager(JsonContentStore(content))
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task_id = progress.add_task("[cyan]Looking up copyrights...", total=None)
        try:
            blocks = manager.get_copyright_by(products, mode)
        except DataError as e:
            console.print(f"[red]✘[/red] Failed to get copyrights: {e}")
            return 1
        if not blocks:
            console.print("[red]✘[/red] No copyrights found for the provided products.")
            return 1

        progress.update(task_id, description=f"[cyan]Downloading logos for [bold]{len(blocks)}[/bold] cards...")
        reader = asyncio.run(manager.stream_copyright(blocks, mode))

        progress.update(task_id, description="[green]Writing PDF...")
        try:
            with reader, output_path.open("wb") as f:
                for chunk in reader:
                    f.write(chunk)
        except CopyrightSheetError as e:
            console.print(f"[red]✘[/red] Generating PDF failed: {e}")
            output_path.unlink(missing_ok=True)
            return 1

    # Print summary
    console.print()

    table = Table(box=box.ROUNDED, border_style="green")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Cards", f"[bold]{len(blocks)}[/bold]")
    table.add_row("Pages created", f"[bold]{len(PdfReader(str(output_path)).pages)}[/bold]")
    table.add_row("Output file", f"[bold]{output_path}[/bold]")
    table.add_row("File size", f"[bold]{get_file_size_str(output_path)}[/bold]")

    console.print(table)
    console.print()
    console.print("[green]✔[/green] [bold green]Done![/bold green] Your copyright sheet is ready.")
    console.print()
    return 0


def run_serve(content: Path, host: str, port: int) -> int:
    """Run the serve command."""
    import uvicorn

    from copyright_sheet.api import create_app

    app = create_app(CopyrightManager(JsonContentStore(content)))
    console.print(f"[cyan]Serving copyright API on http://{host}:{port}[/cyan]")
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command is None:
        parser.print_help()
        return 2

    content = Path(args.content).resolve()

    if args.command == "build":
        return run_build(
            content=content,
            products=args.product,
            mode=args.mode,
            output_path=Path(args.output).resolve(),
        )
    return run_serve(content=content, host=args.host, port=args.port)


if __name__ == "__main__":
    raise SystemExit(main())
