"""
Tests for the mido input adapter
"""

import asyncio

import mido
import pytest

from huebeat.hardware import midi_input
from huebeat.hardware.midi_input import MidiInputAdapter, midi_event_from_message
from huebeat.models.enums import MidiEventKind
from huebeat.models.midi import MidiEvent


class FakePort:
    def __init__(self, name, callback):
        self.name = name
        self.callback = callback
        self.closed = False

    def close(self):
        self.closed = True


async def ignore(event):
    pass


class TestMessageConversion:

    def test_note_on(self):
        event = midi_event_from_message(mido.Message("note_on", channel=9, note=36, velocity=100), 12.5)
        assert event == MidiEvent.note_on(9, 36, 100, 12.5)

    def test_note_off(self):
        event = midi_event_from_message(mido.Message("note_off", channel=1, note=40, velocity=64), 0)
        assert event.kind is MidiEventKind.NOTE_OFF
        assert event.value == 0
        assert event.is_note_off

    def test_control_and_program_change(self):
        cc = midi_event_from_message(mido.Message("control_change", channel=0, control=69, value=2), 5)
        pc = midi_event_from_message(mido.Message("program_change", channel=0, program=5), 6)

        assert (cc.kind, cc.number, cc.value) == (MidiEventKind.CONTROL_CHANGE, 69, 2)
        assert (pc.kind, pc.number) == (MidiEventKind.PROGRAM_CHANGE, 5)

    @pytest.mark.parametrize("msg_type, kind", [
        ("clock", MidiEventKind.CLOCK),
        ("start", MidiEventKind.START),
        ("continue", MidiEventKind.CONTINUE),
        ("stop", MidiEventKind.STOP),
    ])
    def test_system_realtime(self, msg_type, kind):
        event = midi_event_from_message(mido.Message(msg_type), 99.0)
        assert event.kind is kind
        assert event.timestamp == 99.0

    def test_ignored_types(self):
        assert midi_event_from_message(mido.Message("pitchwheel", pitch=100), 0) is None
        assert midi_event_from_message(mido.Message("aftertouch", value=10), 0) is None


class TestPortSelection:

    def test_first_port_without_filter(self, monkeypatch):
        monkeypatch.setattr(midi_input, "list_input_ports", lambda: ["IAC Bus 1", "HX Stomp MIDI"])
        assert MidiInputAdapter(ignore)._select_port() == "IAC Bus 1"

    def test_filter_substring(self, monkeypatch):
        monkeypatch.setattr(midi_input, "list_input_ports", lambda: ["IAC Bus 1", "HX Stomp MIDI"])
        assert MidiInputAdapter(ignore, port_filter="HX Stomp")._select_port() == "HX Stomp MIDI"
        assert MidiInputAdapter(ignore, port_filter="Launchpad")._select_port() is None

    @pytest.mark.asyncio
    async def test_open_without_ports(self, monkeypatch):
        monkeypatch.setattr(midi_input, "list_input_ports", lambda: [])
        adapter = MidiInputAdapter(ignore)

        assert adapter.open(asyncio.get_running_loop()) is False
        assert adapter.port is None

    @pytest.mark.asyncio
    async def test_open_and_close(self, monkeypatch):
        monkeypatch.setattr(midi_input, "list_input_ports", lambda: ["HX Stomp MIDI"])
        monkeypatch.setattr(midi_input.mido, "open_input", lambda name, callback: FakePort(name, callback))
        adapter = MidiInputAdapter(ignore)

        assert adapter.open(asyncio.get_running_loop()) is True
        port = adapter.port
        assert adapter.port_name == "HX Stomp MIDI"
        assert port.callback == adapter._on_message

        adapter.close()
        assert port.closed is True
        assert adapter.port is None

    @pytest.mark.asyncio
    async def test_open_failure_is_reported(self, monkeypatch):
        def refuse(name, callback):
            raise OSError("device busy")

        monkeypatch.setattr(midi_input, "list_input_ports", lambda: ["HX Stomp MIDI"])
        monkeypatch.setattr(midi_input.mido, "open_input", refuse)

        assert MidiInputAdapter(ignore).open(asyncio.get_running_loop()) is False


class TestDelivery:

    @pytest.mark.asyncio
    async def test_messages_reach_handler_on_loop(self):
        received = []

        async def handler(event):
            received.append(event)

        adapter = MidiInputAdapter(handler, clock=lambda: 1234.0)
        adapter._loop = asyncio.get_running_loop()

        adapter._on_message(mido.Message("note_on", channel=0, note=36, velocity=90))
        adapter._on_message(mido.Message("pitchwheel", pitch=10))
        await asyncio.sleep(0.01)

        assert received == [MidiEvent.note_on(0, 36, 90, 1234.0)]
        assert adapter.messages_received == 1
        assert adapter.messages_ignored == 1

    @pytest.mark.asyncio
    async def test_handler_failure_is_counted_and_delivery_continues(self):
        received = []

        async def handler(event):
            if event.number == 36:
                raise ValueError("bad rule")
            received.append(event.number)

        adapter = MidiInputAdapter(handler, clock=lambda: 0.0)
        adapter._loop = asyncio.get_running_loop()

        adapter._on_message(mido.Message("note_on", channel=0, note=36, velocity=90))
        adapter._on_message(mido.Message("note_on", channel=0, note=38, velocity=90))
        await asyncio.sleep(0.01)

        assert adapter.handler_errors == 1
        assert received == [38]
        assert adapter.messages_received == 2

    def test_without_loop_events_are_counted_only(self):
        adapter = MidiInputAdapter(ignore)
        adapter._on_message(mido.Message("clock"))
        assert adapter.messages_received == 1
