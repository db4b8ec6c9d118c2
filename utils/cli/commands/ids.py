"""Address registry command.

Assembles the scenario the same way `satgw simulate` does and dumps
the resulting ID maps, so the printed IDs are the ones used in traces.
"""
import click

from core.models.gw_mac_config import FrameConfigError
from core.models.packet import Mac48Address
from core.network.id_mapper import AddressRegistry
from simulator.forward_link_simulation import ForwardLinkSimulation
from utils.config_loader import ConfigLoadError, ConfigValidationError, load_simulation_config


def build_registry(config: dict) -> AddressRegistry:
    """Registry of a scenario as attached during simulation assembly."""
    return ForwardLinkSimulation.from_config(config).registry


@click.command()
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--address", "-a", multiple=True, help="Describe a single address")
def ids(config_path: str, address):
    """Dump the address to ID maps for a scenario file."""
    try:
        config = load_simulation_config(config_path)
        registry = build_registry(config)
    except (ConfigLoadError, ConfigValidationError, FrameConfigError, ValueError) as e:
        raise click.ClickException(str(e))

    if address:
        for text in address:
            try:
                mac = Mac48Address.from_string(text)
            except ValueError as e:
                raise click.BadParameter(str(e), param_hint="--address")
            click.echo(registry.describe_address(mac))
    else:
        click.echo(registry.dump_all())
