"""Main CLI entry point.

This module defines the main CLI group and registers all commands.
"""
import click

from .commands.simulate import simulate
from .commands.ids import ids


@click.group()
@click.version_option(version="1.0.0", prog_name="satgw")
def main():
    """Satellite gateway forward link MAC scheduling tool."""
    pass


main.add_command(simulate)
main.add_command(ids)


if __name__ == "__main__":
    main()
