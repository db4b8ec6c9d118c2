"""Forward link simulation command.

Runs the gateway MAC scheduler against a scenario file and reports
frame statistics.
"""
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from core.models.bb_frame import FrameOverflowError
from core.models.gw_mac_config import FrameConfigError
from simulator.forward_link_simulation import (
    DEFAULT_DURATION_SECONDS,
    ForwardLinkSimulation,
    SimulationReport,
)
from utils.config_loader import ConfigLoadError, ConfigValidationError, load_simulation_config
from utils.json_utils import dumps_report, save_json
from utils.logger import Logger


console = Console()

# 仿真日志输出到控制台的顶层包
LOGGED_PACKAGES = ("core", "scheduler", "simulator")


def _print_report(report: SimulationReport) -> None:
    """Print rich simulation report."""
    metrics = report.metrics
    console.print(Panel(f"前向链路仿真报告\n仿真时长: {report.duration_seconds:.3f} s"))

    table = Table(title="帧统计")
    table.add_column("指标", style="cyan")
    table.add_column("数值", justify="right")

    table.add_row("发送帧数", str(metrics.frame_count))
    table.add_row("填充帧数", str(metrics.dummy_frame_count))
    table.add_row("短帧/常规帧", f"{metrics.short_frame_count}/{metrics.normal_frame_count}")
    table.add_row("数据单元数", str(metrics.unit_count))
    table.add_row("数据字节", str(metrics.payload_bytes))
    table.add_row("平均填充率", f"{metrics.mean_fill_ratio:.2%}")
    table.add_row("最小填充率", f"{metrics.min_fill_ratio:.2%}")
    table.add_row("空口占用率", f"{metrics.airtime_utilization:.2%}")
    table.add_row("吞吐量", f"{metrics.throughput_bps / 1e6:.3f} Mbit/s")
    console.print(table)

    buffers = Table(title="缓存统计")
    buffers.add_column("项目", style="cyan")
    buffers.add_column("字节", justify="right")
    buffers.add_row("入队", str(report.bytes_enqueued))
    buffers.add_row("出队", str(report.bytes_dequeued))
    buffers.add_row("剩余", str(report.bytes_still_buffered))
    console.print(buffers)


@click.command()
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--duration", "-d", type=float, default=None,
              help="Simulated time in seconds (overrides simulation.duration_seconds)")
@click.option("--seed", type=int, default=None, help="Random seed for RANDOM_SORT")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.option("--log-level", default="WARNING", show_default=True, help="Log level")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Also write the JSON report to this file")
def simulate(config_path: str, duration: Optional[float], seed: Optional[int],
             as_json: bool, log_level: str, output: Optional[str]):
    """Run a forward link simulation from a scenario file."""
    try:
        config = load_simulation_config(config_path)
    except (ConfigLoadError, ConfigValidationError) as e:
        raise click.ClickException(str(e))

    if duration is None:
        duration = config.get("simulation", {}).get("duration_seconds", DEFAULT_DURATION_SECONDS)
    if duration <= 0:
        raise click.BadParameter("duration must be positive", param_hint="--duration")

    try:
        simulation = ForwardLinkSimulation.from_config(config, seed=seed, env_prefix="SATGW_GW_MAC_")
    except (ConfigValidationError, FrameConfigError, ValueError) as e:
        raise click.ClickException(str(e))

    for package in LOGGED_PACKAGES:
        Logger(package, level=log_level, event_scheduler=simulation.clock).add_console_handler()

    try:
        report = simulation.run(duration)
    except FrameOverflowError as e:
        raise click.ClickException(f"frame overflow: {e}")

    if output is not None:
        try:
            save_json(report.to_dict(), output)
        except OSError as e:
            raise click.ClickException(f"cannot write report: {e}")

    if as_json:
        click.echo(dumps_report(report.to_dict()))
    else:
        _print_report(report)
