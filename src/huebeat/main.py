"""
main.py — Application entry point for huebeat
---------------------------------------------

Responsible for:
- loading configuration
- wiring tempo, resolver, generator, smoother, scheduler and service
- opening the MIDI input and starting the frame tick loop
- graceful shutdown on Ctrl+C / SIGTERM
"""

import argparse
import asyncio
import signal
import sys
from typing import Optional

from huebeat.animations.generator import AnimationGenerator
from huebeat.engine.frame_scheduler import FrameScheduler
from huebeat.engine.spring import TransitionSmoother
from huebeat.engine.tempo_tracker import TempoTracker
from huebeat.engine.trigger_resolver import TriggerResolver
from huebeat.hardware.midi_input import MidiInputAdapter, list_input_ports
from huebeat.hardware.queue_sink import QueueSink
from huebeat.managers.config_manager import ConfigManager
from huebeat.models.enums import LogCategory, LogLevel
from huebeat.services.event_bus import EventBus
from huebeat.services.middleware import log_middleware
from huebeat.services.performance_service import PerformanceService
from huebeat.utils.logger import configure_logger, get_logger

log = get_logger().for_category(LogCategory.SYSTEM)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="huebeat", description="MIDI-driven, tempo-synced light engine")
    parser.add_argument("--config", help="Path to config.yaml (default: packaged config)")
    parser.add_argument("--port", help="MIDI input port name filter (overrides engine.midi_port)")
    parser.add_argument("--list-ports", action="store_true", help="List MIDI input ports and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


async def consume_frames(sink: QueueSink) -> None:
    """Stand-in consumer until a bridge client is attached: drains and logs frames"""
    sink_log = get_logger().for_category(LogCategory.SINK)
    while True:
        frame = await sink.get()
        sink_log.debug("Frame", **frame.to_dict())


async def main(config_path: Optional[str] = None, port: Optional[str] = None, debug: bool = False) -> None:
    """Main async entry point (dependency wiring and event loop startup)."""

    # ========================================================================
    # 1. CONFIGURATION
    # ========================================================================

    log.info("Loading configuration...")
    config_manager = ConfigManager(config_path)
    config_manager.load()
    engine = config_manager.engine
    configure_logger(LogLevel.DEBUG if debug else engine.log_level)

    event_bus = EventBus()
    event_bus.add_middleware(log_middleware)

    # ========================================================================
    # 2. ENGINE
    # ========================================================================

    tempo = TempoTracker(
        default_bpm=engine.default_bpm,
        window_size=engine.tempo_window,
        stale_ceiling_ms=engine.stale_ceiling_ms,
    )
    smoother = TransitionSmoother(timeout_ms=engine.spring_timeout_ms)
    sink = QueueSink(maxsize=engine.sink_queue_size)
    scheduler = FrameScheduler(tempo, smoother, sink, fps=engine.fps, event_bus=event_bus)

    service = PerformanceService(
        scheduler=scheduler,
        tempo=tempo,
        resolver=TriggerResolver(snapshot_cc=engine.snapshot_cc),
        generator=AnimationGenerator(),
        event_bus=event_bus,
        config=engine,
    )
    service.set_lights(config_manager.light_manager.get_all_lights())
    service.set_scenes(config_manager.mapping_manager.scenes.values())
    service.set_rules(config_manager.mapping_manager.rules)

    # ========================================================================
    # 3. RUN
    # ========================================================================

    loop = asyncio.get_running_loop()
    midi = MidiInputAdapter(service.handle_midi, port_filter=port or engine.midi_port)
    if not midi.open(loop):
        log.warn("Running without MIDI input")

    await scheduler.start()
    consumer_task = asyncio.create_task(consume_frames(sink))

    shutdown = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C raises KeyboardInterrupt instead
            pass

    log.info("huebeat running. Waiting for exit signal...")
    await shutdown.wait()

    # ========================================================================
    # 4. SHUTDOWN
    # ========================================================================

    midi.close()
    await scheduler.stop()
    consumer_task.cancel()
    try:
        await consumer_task
    except asyncio.CancelledError:
        pass
    log.info("huebeat shut down cleanly.", **scheduler.get_metrics())


def run() -> None:
    """Console script entry point"""
    args = build_parser().parse_args()

    if args.list_ports:
        for name in list_input_ports():
            print(name)
        return

    try:
        asyncio.run(main(args.config, args.port, args.debug))
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")
    except Exception as e:
        log.error(f"Fatal error: {e}", exception=e)
        sys.exit(1)


if __name__ == "__main__":
    run()
