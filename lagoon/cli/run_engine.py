"""Run the pool water engine on a JSON input envelope.

Purpose:
  - Estimate the current water state and print dosing recommendations.
Inputs:
  - --input PATH with a PoolWaterEngineInput JSON object; optional --now (ISO-8601).
Outputs:
  - SUMMARY lines on stdout, or the full output envelope with --json.
Example:
  - PYTHONPATH=. python3 lagoon/cli/run_engine.py --input pool.json --now 2026-06-01T12:00:00Z
"""

from __future__ import annotations

import argparse
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

from lagoon.app_api.codec import input_from_dict, output_to_json, parse_timestamp
from lagoon.app_api.facade import PoolWaterEngine
from lagoon.cli._debug_utils import _dbg, _debug_enabled, _effective_limit
from lagoon.core.chemistry.model_config import DEFAULT_MODEL_ID, load_model_config
from lagoon.core.engine.estimator import events_in_window, set_estimator_debug
from lagoon.helpers.dosing_formatter import DEFAULT_CUP_GRAMS, format_dose


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Estimate pool water state and recommend doses")
    parser.add_argument("--input", required=True, help="Engine input JSON path")
    parser.add_argument("--now", default=None, help="Current time (ISO-8601); defaults to system clock")
    parser.add_argument("--model", default=DEFAULT_MODEL_ID, help="Chemistry model id or alias")
    parser.add_argument("--json", action="store_true", dest="as_json", help="Print full output JSON")
    parser.add_argument("--horizon-hours", type=float, default=0.0, help="Print projection table")
    parser.add_argument("--step-hours", type=float, default=6.0, help="Projection step in hours")
    parser.add_argument("--dose-unit", default="gramm", choices=["gramm", "becher"])
    parser.add_argument("--cup-grams", type=float, default=DEFAULT_CUP_GRAMS)
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--debug-limit", type=int, default=0, help="Max events to list (0 = all)")
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    try:
        config = load_model_config(args.model)
        payload = json.loads(Path(args.input).read_text(encoding="utf-8"))
        inp = input_from_dict(payload)
        now = parse_timestamp(args.now, "--now") if args.now else datetime.now(timezone.utc)
        inp.validate(now)
        if args.step_hours <= 0:
            raise ValueError("--step-hours must be > 0")
    except (OSError, ValueError) as exc:
        print(f"SUMMARY status=ERROR message={exc}")
        raise SystemExit(2)

    if _debug_enabled(args):
        set_estimator_debug(lambda msg: _dbg(args, msg))
    try:
        engine = PoolWaterEngine(config)
        window = events_in_window(inp.dosing_history, inp.last_measurement.timestamp, now)
        for event in window[: _effective_limit(args, window)]:
            _dbg(
                args,
                f"event at={event.timestamp.isoformat()} "
                f"product={event.product_id} amount={event.amount}",
            )
        output = engine.process(inp, now)
        series = None
        if args.horizon_hours > 0:
            series = engine.project(inp, now, args.horizon_hours, args.step_hours)
    finally:
        set_estimator_debug(None)

    if args.as_json:
        print(output_to_json(output))
        return

    state = output.estimated_state
    print(f"SUMMARY model_id={config.model_id}")
    print(f"SUMMARY now={now.isoformat()}")
    print(f"SUMMARY free_chlorine_ppm={state.free_chlorine_ppm:.3f} ph={state.ph:.3f}")
    print(
        f"SUMMARY confidence={output.confidence.level.value} "
        f"score={output.confidence.score:.3f} reason={output.confidence.reason}"
    )
    for status in output.statuses:
        print(
            f"STATUS parameter={status.parameter.value} action={status.action.value} "
            f"reason={status.reason_code.value}"
        )
    for rec in output.recommendations:
        dose = format_dose(rec.amount, args.dose_unit, args.cup_grams)
        print(
            f"DOSE parameter={rec.parameter.value} product={rec.product_id} "
            f"amount={rec.amount} unit={rec.unit} display={dose}"
        )
    print(f"SUMMARY recommendations={len(output.recommendations)}")

    if series is not None:
        print("PROJECTION hours_from_now at free_chlorine_ppm ph")
        for offset, cl, ph in zip(series.hours, series.free_chlorine_ppm, series.ph):
            at = (now + timedelta(hours=float(offset))).isoformat()
            print(f"PROJECTION {offset:.1f} {at} {cl:.3f} {ph:.3f}")


if __name__ == "__main__":
    main()
