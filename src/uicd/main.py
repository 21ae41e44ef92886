"""
Command line entry.

Usage:
  uicd play script.json --device 127.0.0.1:5555 --device emulator-5556
  uicd devices

Options for play:
  --device         device serial / adb address, repeatable
  --connect        run ``adb connect`` for each device first
  --stop-on-fail   stop a device's sequence at its first failed action
  --vars           JSON or ``$uicd_a=1,$uicd_b=2`` seed for the global variables
  --report         write per-device results as JSON to this file
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from .core.config import settings
from .core.constants import PlayStatus
from .core.logger import logger
from .core.thread_pool import shutdown_pools
from .modules.actions import ActionContext, ActionRunner, load_script
from .modules.emu.adapter import AdapterConfig, DeviceAdapter
from .modules.emu.adb import Adb
from .modules.variables import GlobalVariableMap


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="uicd", description="Replay uicd action scripts on devices")
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", help="play a script")
    play.add_argument("script", help="path to the JSON action script")
    play.add_argument("--device", action="append", required=True, dest="devices")
    play.add_argument("--connect", action="store_true")
    play.add_argument("--stop-on-fail", action="store_true")
    play.add_argument("--vars", default=None)
    play.add_argument("--report", default=None)

    sub.add_parser("devices", help="list attached devices")
    return parser


async def _play(args: argparse.Namespace) -> int:
    actions = load_script(args.script)
    variables = GlobalVariableMap()
    if args.vars:
        variables.fill_raw_map_by_json_or_plain_str(args.vars)

    devices = [DeviceAdapter(AdapterConfig(adb_addr=addr)) for addr in args.devices]
    if args.connect:
        for device in devices:
            device.adb.connect(device.device_id(), timeout=settings.adb_timeout_sec)

    context = ActionContext(variables)
    runner = ActionRunner(context, stop_on_fail=args.stop_on_fail)
    logger.info(f"Playing {len(actions)} actions on {len(devices)} device(s)")
    try:
        results = await runner.play(actions, devices)
    except asyncio.CancelledError:
        runner.cancel()
        raise

    for device_id, device_results in results.items():
        for result in device_results:
            logger.bind(device=device_id).info(f"[{result.play_status.value}] {result.text}")

    if args.report:
        report = {
            "statuses": {k: v.value for k, v in context.statuses().items()},
            "results": {k: [r.to_dict() for r in v] for k, v in results.items()},
            "variables": json.loads(variables.to_json()),
        }
        Path(args.report).write_text(json.dumps(report, ensure_ascii=False, indent=2), encoding="utf-8")

    unfinished = [d.device_id() for d in devices if context.get_play_status(d.device_id()) != PlayStatus.SUCCESS]
    if unfinished:
        logger.error(f"Devices not successful: {', '.join(unfinished)}")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.command == "devices":
            for serial in Adb(settings.adb_path).devices(timeout=settings.adb_timeout_sec):
                print(serial)
            return 0
        return asyncio.run(_play(args))
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130
    finally:
        shutdown_pools()


if __name__ == "__main__":
    sys.exit(main())
