"""
topomap CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import click

from .commands import catalog, layout, resolve
from .utils import configure_logging


@click.group()
@click.version_option(package_name="topomap")
@click.option("-v", "--verbose", is_flag=True, help="Log engine activity at debug level")
def main(verbose: bool):
    """topomap: Layered topology maps of a software estate.

    Lays out applications, services, processes, hosts and datacenters
    and shows everything connected to a selected entity.

    \b
    Quick Start:
      topomap layout
      topomap layout --layer process --seed 7
      topomap resolve svc-auth --view vulnerability
    """
    configure_logging(verbose)


# Register commands
main.add_command(layout.layout)
main.add_command(resolve.resolve)
main.add_command(catalog.catalog)

if __name__ == "__main__":
    main()
