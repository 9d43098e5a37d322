#!/usr/bin/env python3
"""
Standalone Decision Server

This is a separate process that:
1. Receives per-frame lane summaries over ZMQ
2. Runs the steering / stopping-zone controller
3. Publishes actuator commands over ZMQ (setwheel, speed:brake, speed:stop, log)

Usage:
    # Start server with default configuration
    lanepilot-decision

    # Start server with custom config
    lanepilot-decision --config path/to/config.yaml

    # Replay a recorded run (one JSON lane summary per line) without ZMQ
    lanepilot-decision --replay recording.jsonl

Architecture:
    Lane Classifier         Decision Process          Actuator Driver
    ┌──────────────┐       ┌──────────────────┐      ┌──────────────┐
    │ Angle +      │──────►│ SteeringController│─────►│ Wheel /      │
    │ distances    │ ZMQ   │ + Scheduler       │ ZMQ  │ Speed        │
    └──────────────┘       └──────────────────┘      └──────────────┘
"""

import argparse
import json
import signal
import sys
import time
from pathlib import Path
from typing import Iterator, List, Tuple

from lanepilot.constants import LauncherConstants, ScheduleKeys
from lanepilot.core.config import Config, ConfigManager
from lanepilot.decision.clock import ManualClock
from lanepilot.decision.controller import SteeringController
from lanepilot.decision.scheduler import ManualCommandScheduler, ThreadedCommandScheduler
from lanepilot.integration.console import ConsoleCommandSink
from lanepilot.integration.messages import ActuatorCommand, LaneSummary, MessageDecodeError
from lanepilot.utils.terminal import TerminalDisplay, format_decision_stats


class DecisionServer:
    """
    Standalone server that runs the steering controller.

    Single consumer of the lane summary stream: frames reach the controller
    one at a time, in arrival order.
    """

    def __init__(
        self,
        config: Config,
        lane_url: str | None = None,
        bind_url: str | None = None,
        enable_parameter_updates: bool | None = None,
        enable_footer: bool = True,
        verbose: bool = False,
    ):
        """
        Initialize decision server.

        Args:
            config: System configuration
            lane_url: Override for config.messaging.lane_url
            bind_url: Override for config.messaging.control_bind_url
            enable_parameter_updates: Override for config.messaging.enable_parameter_updates
            enable_footer: Show the live status footer
            verbose: Print per-frame controller decisions
        """
        from lanepilot.integration.zmq import LaneSummarySubscriber, ZmqCommandSink

        messaging = config.messaging
        self.config = config
        self.terminal = TerminalDisplay(enable_footer=enable_footer)

        print("\n" + "=" * 60)
        print("Decision Server")
        print("=" * 60)

        bind_url = bind_url or messaging.control_bind_url
        print(f"\nBinding command publisher on {bind_url}...")
        self.sink = ZmqCommandSink(bind_url=bind_url, topic=messaging.control_topic)
        self.scheduler = ThreadedCommandScheduler(self.sink)
        print(f"✓ Command publisher ready (topic '{messaging.control_topic}')")

        print(f"\nInitializing steering controller...")
        self.controller = SteeringController(
            self.scheduler,
            config=config.controller,
            timing=config.timing,
            verbose=verbose,
        )
        print(f"✓ Steering controller ready")
        print(f"  Gains: base={config.controller.base_gain}, "
              f"left={config.controller.left_gain}, right={config.controller.right_gain}")
        print(f"  Timing: command={config.timing.command_interval_ms}ms, "
              f"no-signal={config.timing.no_signal_timeout_ms}ms, "
              f"brake delay={config.timing.brake_delay_ms}ms")

        lane_url = lane_url or messaging.lane_url
        print(f"\nConnecting to lane summaries at {lane_url}...")
        self.subscriber = LaneSummarySubscriber(
            url=lane_url,
            topic=messaging.lane_topic,
            zero_angle_is_missing=messaging.zero_angle_is_missing,
        )
        print(f"✓ Subscribed to '{messaging.lane_topic}'")

        self.param_client = None
        if enable_parameter_updates is None:
            enable_parameter_updates = messaging.enable_parameter_updates
        if enable_parameter_updates:
            from lanepilot.integration.zmq import ParameterClient

            print(f"\nSetting up real-time parameter updates...")
            self.param_client = ParameterClient(broker_url=messaging.parameter_broker_url)
            self.param_client.register_callback(self._on_parameter_update)
            print(f"✓ Parameter updates enabled")

        self.running = False
        self.stopped = False
        self.frame_count = 0
        self.last_print_time = time.time()

        print("\n" + "=" * 60)
        print("Server initialized successfully!")
        print("=" * 60)

    def _on_parameter_update(self, param_name: str, value: float):
        """
        Handle real-time parameter update.

        Args:
            param_name: Parameter name
            value: New value
        """
        success = self.controller.update_parameter(param_name, value)
        if success:
            print(f"[Decision] Parameter updated: {param_name} = {value}")
        else:
            print(f"[Decision] Failed to update parameter: {param_name}")

    def run(self, print_stats: bool = True):
        """Start serving lane summaries."""

        def signal_handler(sig, frame):
            print("\n\nReceived interrupt signal")
            self.stop()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        print("\n" + "=" * 60)
        print("Decision Server Running")
        print("=" * 60)
        print(f"Reading lane summaries from: {self.subscriber.url}")
        print(f"Publishing commands on: {self.sink.bind_url}")
        print("Press Ctrl+C to stop")
        print("=" * 60 + "\n")

        self.running = True
        self.terminal.init_footer()

        try:
            while self.running:
                if self.param_client:
                    self.param_client.poll()

                summary = self.subscriber.receive()
                if summary is None:
                    continue

                start_time = time.perf_counter()
                self.controller.process_summary(summary)
                processing_time_ms = (time.perf_counter() - start_time) * 1000.0

                self.frame_count += 1

                if print_stats and time.time() - self.last_print_time > LauncherConstants.DEFAULT_STATS_INTERVAL:
                    fps = self.frame_count / (time.time() - self.last_print_time)
                    status = self.controller.status()
                    status['fps'] = fps
                    self.terminal.update_footer(status)
                    if not self.terminal.enable_footer:
                        self.terminal.print(format_decision_stats(
                            fps,
                            summary.frame_id,
                            processing_time_ms,
                            self.controller.state.last_rudder_sent,
                        ), prefix="[Decision]")
                    self.frame_count = 0
                    self.last_print_time = time.time()

        except KeyboardInterrupt:
            print("\n\nStopping decision server...")
        finally:
            self.stop()

    def stop(self):
        """Stop the server and cleanup."""
        if self.stopped:
            return
        self.running = False
        self.stopped = True
        self.terminal.clear_footer()

        cancelled = self.scheduler.cancel_all()
        if cancelled:
            print(f"⚠ Dropped {cancelled} pending command(s)")
        self.scheduler.close()

        # Scheduler thread is gone; the socket is ours again.
        # A fired latch may have lost its pending brake/stop to cancel_all.
        if self.config.controller.stop_on_shutdown or self.controller.is_halted:
            self.sink.send(ActuatorCommand.stop())
            time.sleep(LauncherConstants.DEFAULT_SHUTDOWN_FLUSH)
            print("✓ Sent speed:stop")

        if self.param_client:
            self.param_client.close()

        self.subscriber.close()
        self.sink.close()
        print("✓ Decision server stopped")


# =============================================================================
# Replay
# =============================================================================

def iter_recording(
    path: str | Path,
    frame_interval_ms: float,
    zero_angle_is_missing: bool = True,
) -> Iterator[Tuple[float, LaneSummary]]:
    """
    Read a recording of lane summaries, one JSON object per line.

    Frames with a `timestamp` (seconds) are replayed at that time; frames
    without one follow the previous frame after `frame_interval_ms`.
    Malformed lines are reported and skipped.

    Yields:
        (time_ms, LaneSummary)
    """
    now_ms = 0.0
    with open(path, 'r') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            try:
                data = json.loads(line)
                summary = LaneSummary.from_dict(data, zero_angle_is_missing=zero_angle_is_missing)
            except (json.JSONDecodeError, MessageDecodeError) as e:
                print(f"[Replay] ⚠ Skipping line {line_no}: {e}")
                continue

            # from_dict fills in the current time when the frame has none
            if data.get('timestamp') is not None:
                now_ms = summary.timestamp * 1000.0
            else:
                now_ms += frame_interval_ms

            yield now_ms, summary


def replay(
    path: str | Path,
    config: Config,
    frame_interval_ms: float = 33.0,
    verbose: bool = False,
) -> List[ActuatorCommand]:
    """
    Drive the controller from a recording with a manual clock.

    Commands are printed as they become due; delayed commands still pending
    after the last frame are flushed at their due time.

    Returns:
        Every command that was dispatched, in order
    """
    frames = iter_recording(path, frame_interval_ms, config.messaging.zero_angle_is_missing)

    first = next(frames, None)
    if first is None:
        print("[Replay] Recording is empty")
        return []

    clock = ManualClock(start_ms=first[0])
    sink = ConsoleCommandSink(clock)
    scheduler = ManualCommandScheduler(sink, clock)
    controller = SteeringController(
        scheduler,
        config=config.controller,
        timing=config.timing,
        clock=clock,
        verbose=verbose,
    )

    def step(frame_ms: float, summary: LaneSummary):
        # Fire anything that came due between frames at its own time
        for task in scheduler.pending():
            if task.due_ms > frame_ms:
                break
            clock.set(max(clock.now_ms(), task.due_ms))
            scheduler.run_pending()
        clock.set(max(clock.now_ms(), frame_ms))
        controller.process_summary(summary)
        scheduler.run_pending()

    step(*first)
    for frame_ms, summary in frames:
        step(frame_ms, summary)

    for task in scheduler.pending():
        clock.set(max(clock.now_ms(), task.due_ms))
        scheduler.run_pending()

    state = controller.state
    print(f"[Replay] {controller.frame_count} frames, {len(sink.history)} commands")
    print(f"[Replay] stopping zone latch: {state.stopping_zone_detected}, "
          f"emergency stop latch: {state.emergency_stop_activated}")
    if scheduler.is_pending(ScheduleKeys.STOPPING_ZONE_BRAKE):
        print("[Replay] ⚠ Brake still pending")

    return sink.history


def main():
    """Main entry point for decision server."""
    parser = argparse.ArgumentParser(description="Steering / stopping-zone decision server")

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (default: <project-root>/config.yaml)",
    )
    parser.add_argument(
        "--lane-url",
        type=str,
        default=None,
        help="ZMQ URL of the lane summary publisher (default: from config)",
    )
    parser.add_argument(
        "--bind-url",
        type=str,
        default=None,
        help="ZMQ URL to publish actuator commands on (default: from config)",
    )
    parser.add_argument(
        "--no-parameter-updates",
        action="store_true",
        help="Disable real-time parameter updates",
    )
    parser.add_argument(
        "--no-stats",
        action="store_true",
        help="Disable FPS and decision statistics output",
    )
    parser.add_argument(
        "--no-footer",
        action="store_true",
        help="Disable the live status footer",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print every steering decision",
    )
    parser.add_argument(
        "--replay",
        type=str,
        default=None,
        help="Replay a JSON-lines recording of lane summaries instead of serving",
    )
    parser.add_argument(
        "--frame-interval-ms",
        type=float,
        default=33.0,
        help="Replay spacing for frames without a timestamp (default: 33)",
    )

    args = parser.parse_args()

    config = ConfigManager.load(args.config)
    print(f"✓ Configuration loaded")

    if args.replay:
        replay(args.replay, config, frame_interval_ms=args.frame_interval_ms, verbose=args.verbose)
        return 0

    server = DecisionServer(
        config=config,
        lane_url=args.lane_url,
        bind_url=args.bind_url,
        enable_parameter_updates=False if args.no_parameter_updates else None,
        enable_footer=not args.no_footer and not args.no_stats,
        verbose=args.verbose,
    )

    server.run(print_stats=not args.no_stats)

    return 0


if __name__ == "__main__":
    sys.exit(main())
