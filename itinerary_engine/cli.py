"""itinerary-engine CLI 入口：对单日行程重排并输出结算后的时间表"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from itinerary_engine.adapters.location import StaticLocationLookup
from itinerary_engine.application import ReorderCoordinator
from itinerary_engine.config.settings import load_settings
from itinerary_engine.domain.exceptions import DomainError
from itinerary_engine.domain.models import Day
from itinerary_engine.planner.routing_provider import build_routing_client

load_dotenv()  # 自动加载 .env 文件


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _parse_order(raw: str) -> list[str] | None:
    ids = [part.strip() for part in raw.split(",") if part.strip()]
    return ids or None


async def _schedule(day: Day, order: list[str] | None, locations: StaticLocationLookup | None) -> dict[str, Any]:
    settings = load_settings()
    coordinator = ReorderCoordinator(build_routing_client(settings), locations=locations, settings=settings)
    try:
        coordinator.on_sequence_change(day, order or day.activity_ids)
        settled = await coordinator.settle(day.id)
        report = coordinator.conflicts(day.id)
    finally:
        coordinator.close()
    return {
        "day": settled.model_dump(mode="json", by_alias=True),
        "conflicts": report.model_dump(mode="json", by_alias=True),
    }


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="itinerary-engine", description="Itinerary timeline scheduling")
    sub = parser.add_subparsers(dest="command", required=True)

    schedule = sub.add_parser("schedule", help="Schedule one day and report conflicts")
    schedule.add_argument("day", help="Path to a day JSON document")
    schedule.add_argument("--order", default="", help="Comma separated activity ids (default: current order)")
    schedule.add_argument("--locations", default="", help="Optional JSON file of location records")
    schedule.add_argument("--output", default="", help="Write the result here instead of stdout")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    day = Day.model_validate(_load_json(Path(args.day)))
    locations = StaticLocationLookup.from_file(args.locations) if args.locations else None
    try:
        result = asyncio.run(_schedule(day, _parse_order(args.order), locations))
    except DomainError as exc:
        print(json.dumps({"error": True, "code": exc.code, "message": str(exc)}, ensure_ascii=False))
        return 2

    text = json.dumps(result, ensure_ascii=False, indent=2)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
