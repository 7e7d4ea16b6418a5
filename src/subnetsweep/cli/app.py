"""Command line entry point for the subnet sweep."""
from __future__ import annotations

import argparse
import logging
import threading
from pathlib import Path
from typing import Callable

from rich.console import Console
from rich.prompt import IntPrompt, Prompt

from ..config import Config, ConfigPaths, ScanSettings
from ..console import ConsoleReporter
from ..errors import InvalidScanConfig
from ..scanner.campaign import CampaignReport, ScanCampaign
from ..scanner.hosts import MAX_HOST, MIN_HOST, validate_host_range
from ..scanner.probe import PROBE_BACKENDS, make_probe
from ..scanner.ranges import normalize_prefix
from ..utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 2
EXIT_INTERRUPTED = 130

MODES = ("common", "full", "subnet", "quick")

_MENU = (
    ("1", "common", "Sweep common private networks (class A, B and C tables)"),
    ("2", "full", "Sweep all 256 subnets of the full-sweep base"),
    ("3", "subnet", "Scan a single subnet"),
    ("4", "quick", "Quick scan of the most common subnets"),
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subnetsweep",
        description="Parallel ICMP host discovery across private IPv4 subnets",
    )
    parser.add_argument("--timeout", type=float, help="Per-probe timeout in seconds")
    parser.add_argument(
        "--backend",
        choices=sorted(PROBE_BACKENDS),
        help="Probe mechanism (ping shells out, scapy needs root)",
    )
    parser.add_argument(
        "--host-workers", type=int, help="Maximum concurrent probes per subnet"
    )
    parser.add_argument(
        "--subnet-workers", type=int, help="Maximum subnets scanned concurrently"
    )
    parser.add_argument(
        "--progress-every",
        type=int,
        help="Report host progress every N hosts (0 disables)",
    )
    parser.add_argument("--config", type=Path, help="Configuration directory")
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the given options as the new defaults",
    )
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    sub = parser.add_subparsers(dest="mode")
    sub.add_parser("common", help="Sweep class A, B and C private tables")
    full = sub.add_parser("full", help="Sweep 256 subnets under a two-octet base")
    full.add_argument("--base", help="Two-octet base such as 192.168")
    single = sub.add_parser("subnet", help="Scan one subnet")
    single.add_argument("prefix", help="Subnet prefix such as 192.168.1")
    single.add_argument("--start", type=int, default=MIN_HOST, help="First host octet")
    single.add_argument("--end", type=int, default=MAX_HOST, help="Last host octet")
    sub.add_parser("quick", help="Quick scan of common subnets")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.mode == "subnet":
        try:
            args.prefix = normalize_prefix(args.prefix)
            validate_host_range(args.start, args.end)
        except InvalidScanConfig as exc:
            parser.error(str(exc))
    return args


def prompt_mode(args: argparse.Namespace, console: Console) -> argparse.Namespace:
    """Fill in the scan mode interactively when none was given."""

    console.rule("[bold]subnetsweep")
    for key, _mode, text in _MENU:
        console.print(f"  {key}. {text}")
    choice = Prompt.ask(
        "Select a scan", choices=[key for key, _m, _t in _MENU], console=console
    )
    args.mode = next(mode for key, mode, _t in _MENU if key == choice)
    if args.mode == "full":
        args.base = None
    if args.mode == "subnet":
        while True:
            raw = Prompt.ask("Subnet prefix", default="192.168.1", console=console)
            start = IntPrompt.ask("First host", default=MIN_HOST, console=console)
            end = IntPrompt.ask("Last host", default=MAX_HOST, console=console)
            try:
                args.prefix = normalize_prefix(raw)
                validate_host_range(start, end)
            except InvalidScanConfig as exc:
                console.print(f"[red][!] {exc}[/red]")
                continue
            args.start, args.end = start, end
            break
    return args


def load_settings(args: argparse.Namespace) -> ScanSettings:
    config = Config(paths=ConfigPaths.create(args.config))
    overrides = {
        "probe_timeout": args.timeout,
        "probe_backend": args.backend,
        "max_host_workers": args.host_workers,
        "max_subnet_workers": args.subnet_workers,
        "progress_every": args.progress_every,
    }
    settings = ScanSettings.from_config(config).with_overrides(**overrides)
    if args.save_config:
        for key, value in overrides.items():
            if value is not None:
                config.set(key, value)
        config.save()
    return settings


def _campaign_call(
    campaign: ScanCampaign, args: argparse.Namespace
) -> Callable[[], CampaignReport]:
    if args.mode == "common":
        return campaign.common_networks
    if args.mode == "full":
        return lambda: campaign.full_sweep(getattr(args, "base", None))
    if args.mode == "subnet":
        return lambda: campaign.single_subnet(args.prefix, args.start, args.end)
    return campaign.quick_scan


def run_campaign(
    call: Callable[[], CampaignReport],
    cancel_event: threading.Event,
    console: Console,
) -> CampaignReport:
    """Run *call* on a worker thread so Ctrl-C can request cancellation."""

    outcome: dict[str, object] = {}

    def target() -> None:
        try:
            outcome["report"] = call()
        except BaseException as exc:  # re-raised on the calling thread
            outcome["error"] = exc

    worker = threading.Thread(target=target, name="campaign", daemon=True)
    worker.start()
    try:
        while worker.is_alive():
            worker.join(0.2)
    except KeyboardInterrupt:
        console.print("\n[yellow][!] Interrupted, finishing in-flight batches...[/yellow]")
        cancel_event.set()
        worker.join()

    error = outcome.get("error")
    if isinstance(error, BaseException):
        raise error
    report = outcome.get("report")
    if not isinstance(report, CampaignReport):
        raise RuntimeError("campaign finished without a report")
    return report


def run_cli(args: argparse.Namespace, console: Console | None = None) -> int:
    console = console or Console()
    setup_logging(
        logging.DEBUG if args.verbose else logging.WARNING,
        args.log_file,
        console=console,
    )
    if args.mode is None:
        args = prompt_mode(args, console)

    try:
        settings = load_settings(args)
        probe = make_probe(settings.probe_backend)
    except InvalidScanConfig as exc:
        console.print(f"[red][!] {exc}[/red]")
        return EXIT_INVALID

    cancel_event = threading.Event()
    campaign = ScanCampaign(
        probe,
        settings,
        listener=ConsoleReporter(console, verbose=args.verbose),
        cancel_event=cancel_event,
    )
    try:
        report = run_campaign(_campaign_call(campaign, args), cancel_event, console)
    except InvalidScanConfig as exc:
        console.print(f"[red][!] {exc}[/red]")
        return EXIT_INVALID
    return EXIT_INTERRUPTED if report.cancelled else EXIT_OK


def main(argv: list[str] | None = None) -> int:
    return run_cli(parse_args(argv))


__all__ = [
    "EXIT_INTERRUPTED",
    "EXIT_INVALID",
    "EXIT_OK",
    "MODES",
    "build_parser",
    "load_settings",
    "main",
    "parse_args",
    "prompt_mode",
    "run_campaign",
    "run_cli",
]
