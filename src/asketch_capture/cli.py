"""
Command-line interface for asketch-capture.

Captures a page once per viewport and writes page-<size>.asketch.json files
for the html-sketchapp Sketch plugin. Option defaults can be kept in an
html-sketchapp.config.json file in the project directory.
"""

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .api import capture
from .config import (
    DEFAULT_ENTRY,
    DEFAULT_NAVIGATION_TIMEOUT,
    DEFAULT_WAIT_UNTIL,
    WAIT_UNTIL_CHOICES,
    build_run_config,
    find_config_file,
    load_config_file,
    parse_viewport_options,
)
from .errors import AsketchCaptureError, ConfigurationError
from .output import output_filename

console = Console()
err_console = Console(stderr=True)


def load_config_defaults(ctx: click.Context, param: click.Parameter, value: str | None) -> Path | None:
    """Read the config file into click's defaults before other options are parsed."""
    path = Path(value) if value else find_config_file()
    if path is None:
        return None

    try:
        defaults = load_config_file(path)
    except ConfigurationError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/]")
        raise click.Abort()

    if 'file' in defaults:
        defaults['file_path'] = defaults.pop('file')

    ctx.default_map = {**defaults, **(ctx.default_map or {})}
    return path


@click.command()
@click.option('--config', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              is_eager=True, expose_value=False, callback=load_config_defaults,
              help='Path to a JSON config file (default: nearest html-sketchapp.config.json)')
@click.option('-s', '--serve', type=click.Path(file_okay=False),
              help='Directory to serve, relative to working directory')
@click.option('-u', '--url',
              help='URL to open. When using --serve, URL should be root relative.')
@click.option('-f', '--file', 'file_path',
              help='File to open, relative to working directory')
@click.option('-o', '--out-dir', required=True,
              help='Output directory, relative to working directory')
@click.option('-v', '--viewport', '--viewports', 'viewports', multiple=True, metavar='NAME=SPEC',
              help='Named viewport size, repeatable, e.g. -v Desktop=1024x768 -v Mobile=320x568@2')
@click.option('-d', '--debug', is_flag=True,
              help='Show the browser, echo page console output and leave the browser open')
@click.option('--symbol-middleware', type=click.Path(),
              help='Path to symbol middleware to run when looping over sketch layers')
@click.option('--puppeteer-args',
              help='Chromium command line arguments, e.g. --puppeteer-args="--no-sandbox --disable-setuid-sandbox"')
@click.option('--puppeteer-executable-path', type=click.Path(),
              help='Path to a Chromium executable to use instead of the downloaded one')
@click.option('--puppeteer-user-data-dir', type=click.Path(file_okay=False),
              help='Chromium user data directory to use instead of a blank temporary one')
@click.option('--puppeteer-wait-until', type=click.Choice(WAIT_UNTIL_CHOICES), default=DEFAULT_WAIT_UNTIL,
              show_default=True, help='Navigation event to wait for before considering the page loaded')
@click.option('--navigation-timeout', type=float, default=DEFAULT_NAVIGATION_TIMEOUT, show_default=True,
              help='Seconds to wait for the page to load')
@click.option('--extract-timeout', type=float, default=None,
              help='Seconds to wait for layer extraction per viewport (default: no limit)')
@click.option('--extractor-script', type=click.Path(dir_okay=False),
              help='Layer extraction bundle to inject (default: bundled page2layers.bundle.js)')
@click.option('--extractor-entry', default=DEFAULT_ENTRY, show_default=True,
              help='JavaScript expression returning the layer document')
def main(serve, url, file_path, out_dir, viewports, debug, symbol_middleware,
         puppeteer_args, puppeteer_executable_path, puppeteer_user_data_dir,
         puppeteer_wait_until, navigation_timeout, extract_timeout,
         extractor_script, extractor_entry):
    """Capture a web page as html-sketchapp layer documents, one per viewport.

    \b
    Examples:
        asketch-capture --url https://example.com --out-dir sketch
        asketch-capture --serve public --url /styleguide.html --out-dir sketch \\
            -v Desktop=1024x768 -v Mobile=320x568@2
    """
    try:
        config = build_run_config(
            out_dir=out_dir,
            serve=serve,
            url=url,
            file=file_path,
            viewports=parse_viewport_options(list(viewports)),
            debug=debug,
            symbol_middleware=symbol_middleware,
            puppeteer_args=puppeteer_args,
            puppeteer_executable_path=puppeteer_executable_path,
            puppeteer_user_data_dir=puppeteer_user_data_dir,
            puppeteer_wait_until=puppeteer_wait_until,
            navigation_timeout=navigation_timeout,
            extract_timeout=extract_timeout,
            extractor_script=extractor_script,
            extractor_entry=extractor_entry,
        )
    except ConfigurationError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/]")
        raise click.Abort()

    target = f"{serve} → " if serve else ''
    console.print(f"[bold]Capturing:[/] {escape(target + (url or file_path or '/'))}")
    console.print(f"[bold]Output:[/] {escape(str(config.out_dir))}")
    sizes = ', '.join(f'{n} ({v})' for n, v in config.viewports.items())
    console.print(f"[bold]Viewports:[/] {escape(sizes)}")
    console.print()

    try:
        result = capture(config)
    except AsketchCaptureError as e:
        err_console.print(f"[red]✗ {type(e).__name__}: {escape(str(e))}[/]")
        raise click.Abort()

    table = Table(title="Captured documents")
    table.add_column("Viewport", style="cyan")
    table.add_column("File")
    for name, viewport in config.viewports.items():
        table.add_row(escape(name), escape(str(config.out_dir / output_filename(viewport.key))))

    console.print()
    console.print(table)
    console.print(f"[bold green]✓ Wrote {len(result.files)} file(s) to[/] {escape(str(result.out_dir))}")


if __name__ == '__main__':
    main()
