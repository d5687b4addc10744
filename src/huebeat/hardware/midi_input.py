"""
MIDI input adapter (mido)

Converts mido.Message values into MidiEvent values and hands them to the
asyncio loop. Port discovery and byte parsing stay in mido; this module only
maps message types and timestamps.

mido delivers messages on its own callback thread, so events are submitted
to the loop with asyncio.run_coroutine_threadsafe.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import time
from typing import Awaitable, Callable, Optional

import mido

from huebeat.models.enums import LogCategory, MidiEventKind
from huebeat.models.midi import MidiEvent
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.MIDI)

MidiHandler = Callable[[MidiEvent], Awaitable[None]]

_SYSTEM_KINDS = {
    "clock": MidiEventKind.CLOCK,
    "start": MidiEventKind.START,
    "continue": MidiEventKind.CONTINUE,
    "stop": MidiEventKind.STOP,
}


def midi_event_from_message(msg: mido.Message, timestamp: float) -> Optional[MidiEvent]:
    """
    Map one mido message to a MidiEvent.

    Args:
        msg: Parsed mido message
        timestamp: Arrival time in ms (monotonic)

    Returns:
        MidiEvent, or None for message types the engine ignores
    """
    if msg.type == "note_on":
        return MidiEvent.note_on(msg.channel, msg.note, msg.velocity, timestamp)
    if msg.type == "note_off":
        return MidiEvent.note_off(msg.channel, msg.note, timestamp)
    if msg.type == "control_change":
        return MidiEvent.control_change(msg.channel, msg.control, msg.value, timestamp)
    if msg.type == "program_change":
        return MidiEvent.program_change(msg.channel, msg.program, timestamp)
    kind = _SYSTEM_KINDS.get(msg.type)
    if kind is not None:
        return MidiEvent(kind, timestamp=timestamp)
    return None


def list_input_ports():
    return mido.get_input_names()


class MidiInputAdapter:
    """
    Physical MIDI input via mido.

    Example:
        adapter = MidiInputAdapter(service.handle_midi, port_filter="HX Stomp")
        adapter.open(asyncio.get_running_loop())
        ...
        adapter.close()
    """

    def __init__(
        self,
        handler: MidiHandler,
        port_filter: Optional[str] = None,
        clock: Callable[[], float] = lambda: time.perf_counter() * 1000.0,
    ):
        """
        Args:
            handler: Coroutine function awaited on the loop for each event
            port_filter: Substring of the port name (None = first port)
            clock: Millisecond clock stamped on events at arrival
        """
        self.handler = handler
        self.port_filter = port_filter
        self.clock = clock
        self.port = None
        self.port_name: Optional[str] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.messages_received = 0
        self.messages_ignored = 0
        self.handler_errors = 0

    def _select_port(self) -> Optional[str]:
        names = list_input_ports()
        if not names:
            log.warn("No MIDI input ports available")
            return None
        if self.port_filter:
            for name in names:
                if self.port_filter in name:
                    return name
            log.warn("No MIDI input port matches filter", port_filter=self.port_filter, available=names)
            return None
        return names[0]

    def open(self, loop: asyncio.AbstractEventLoop) -> bool:
        """
        Open the input port and start delivering events to `loop`.

        Returns:
            False when no port could be opened (engine keeps running)
        """
        self._loop = loop
        try:
            name = self._select_port()
            if name is None:
                return False
            self.port = mido.open_input(name, callback=self._on_message)
        except (OSError, ImportError) as e:
            # ImportError: mido backend (python-rtmidi) not installed
            log.error("Cannot open MIDI input", exception=e)
            return False

        self.port_name = name
        log.info("Listening for MIDI input", port=name)
        return True

    def close(self) -> None:
        if self.port is not None:
            self.port.close()
            log.info("MIDI input closed", port=self.port_name, received=self.messages_received, errors=self.handler_errors)
        self.port = None

    def _on_message(self, msg: mido.Message) -> None:
        """mido callback thread"""
        event = midi_event_from_message(msg, self.clock())
        if event is None:
            self.messages_ignored += 1
            return
        self.messages_received += 1
        if self._loop is None or self._loop.is_closed():
            return
        future = asyncio.run_coroutine_threadsafe(self.handler(event), self._loop)
        future.add_done_callback(self._on_handled)

    def _on_handled(self, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self.handler_errors += 1
            log.error("MIDI handler failed", exception=exc)
