"""
CLI Utilities - Shared helper functions for command line operations.

Formatted printing plus the loading steps every command shares: engine
configuration (with an optional seed override) and the entity catalog.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from ..config import EngineConfig, load_config
from ..layout.catalog import EntityCatalog


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    """
    Print a warning message with a yellow alert symbol.

    Args:
        message (str): The warning message to display.
    """
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    """Print an informational message, dimmed."""
    click.echo(click.style(f"   {message}", dim=True))


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="[%X]",
    )


def load_engine_config(config_path: Optional[Path], seed: Optional[int] = None) -> EngineConfig:
    """
    Load the engine configuration and apply a --seed override.

    Raises:
        ConfigError: the file cannot be loaded.
    """
    config = load_config(config_path)
    if seed is None:
        return config
    cluster = config.cluster.model_copy(update={"seed": seed})
    return config.model_copy(update={"cluster": cluster})


def load_catalog(catalog_path: Optional[Path]) -> Optional[EntityCatalog]:
    """The catalog at catalog_path, or None for the built-in demo estate."""
    if catalog_path is None:
        return None
    return EntityCatalog.from_yaml(catalog_path)
