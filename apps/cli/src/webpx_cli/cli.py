"""CLI for WebP Express."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from webpx_backend.app import create_app
from webpx_backend.config import Config
from webpx_backend.nonce import CONVERT_NONCE_ACTION, NonceManager
from webpx_backend.services import ConvertService
from webpx_shared.protocol import AjaxConvertParams


@click.group()
@click.option("--document-root", envvar="WEBPX_DOCUMENT_ROOT", type=click.Path(file_okay=False),
              help="Document root of the site")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, document_root: str | None, verbose: bool) -> None:
    """Convert images to WebP the way the WebP Express plugin does."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    ctx.obj = Config.load(Path(document_root).resolve() if document_root else None)


@cli.command()
@click.argument("filename")
@click.option("--converter", default=None, help="Only use this converter (needs --config-overrides)")
@click.option("--config-overrides", default=None, help="JSON object merged over config.json")
@click.pass_obj
def convert(config: Config, filename: str, converter: str | None, config_overrides: str | None) -> None:
    """Convert FILENAME (absolute, or relative to the document root)."""
    config.ensure_directories()
    nonces = NonceManager(config.nonce_secret, config.nonce_max_age)
    service = ConvertService(config, nonces)

    params = AjaxConvertParams(
        nonce=nonces.create(CONVERT_NONCE_ACTION),
        filename=filename,
        converter=converter,
        config_overrides=config_overrides,
    )
    response = service.process_ajax_convert_file(params)
    click.echo(json.dumps(response.body, indent=4, ensure_ascii=False))
    if response.status != 200 or not response.body.get("success"):
        sys.exit(1)


@cli.command()
@click.argument("source")
@click.pass_obj
def destination(config: Config, source: str) -> None:
    """Print where the WebP of SOURCE goes."""
    service = ConvertService(config)
    click.echo(str(service.get_destination(source)))


@cli.command("find-source")
@click.argument("destination")
@click.pass_obj
def find_source(config: Config, destination: str) -> None:
    """Print the source image of DESTINATION."""
    service = ConvertService(config)
    source = service.find_source(destination)
    if source is None:
        click.echo(f"No source found for {destination}", err=True)
        sys.exit(1)
    click.echo(str(source))


@cli.command()
@click.pass_obj
def nonce(config: Config) -> None:
    """Print a fresh nonce for the convert-file AJAX call."""
    click.echo(NonceManager(config.nonce_secret, config.nonce_max_age).create(CONVERT_NONCE_ACTION))


@cli.command()
@click.option("-h", "--host", default=None, help="Bind host")
@click.option("-p", "--port", default=None, type=int, help="Bind port")
@click.pass_obj
def serve(config: Config, host: str | None, port: int | None) -> None:
    """Run the backend's development server."""
    app = create_app(config)
    try:
        app.run(host=host or config.host, port=port or config.port, use_reloader=False)
    except KeyboardInterrupt:
        logging.info("Interrupted")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
