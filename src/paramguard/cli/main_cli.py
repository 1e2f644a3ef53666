"""
Top-level CLI that aggregates the paramguard sub-apps.
"""

import logging

import typer

from paramguard.cli.archive_cli import app as archive_app
from paramguard.core.config import settings

main_app = typer.Typer(help="paramguard CLI")

# Add subcommands as Typer sub-apps:
main_app.add_typer(archive_app, name="archive")


def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s %(name)s - %(message)s"
    )


def main():
    configure_logging()
    main_app()


if __name__ == "__main__":
    main()
