import pytest

from huebeat.animations.generator import AnimationGenerator
from huebeat.engine.frame_scheduler import FrameScheduler
from huebeat.engine.spring import TransitionSmoother
from huebeat.engine.tempo_tracker import TempoTracker
from huebeat.engine.trigger_resolver import TriggerResolver
from huebeat.hardware.virtual_sink import VirtualSink
from huebeat.models.enums import TargetType
from huebeat.models.light import LightInfo
from huebeat.services.event_bus import EventBus
from huebeat.services.performance_service import PerformanceService


class FakeClock:
    """Manually advanced millisecond clock for deterministic ticks"""

    def __init__(self, start: float = 0.0):
        self.ms = start

    def __call__(self) -> float:
        return self.ms

    def advance(self, ms: float) -> float:
        self.ms += ms
        return self.ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return VirtualSink()


@pytest.fixture
def tempo():
    return TempoTracker(default_bpm=120)


@pytest.fixture
def smoother():
    return TransitionSmoother()


@pytest.fixture
def scheduler(tempo, smoother, sink, clock):
    # fps=50: the first tick advances 20 ms, later ticks follow the fake clock
    return FrameScheduler(tempo, smoother, sink, fps=50, clock=clock)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def published(event_bus):
    """Every event that reaches the bus, in order"""
    events = []

    def record(event):
        events.append(event)
        return event

    event_bus.add_middleware(record)
    return events


@pytest.fixture
def lights():
    return [
        LightInfo("stage-left", name="Stage Left", gradient=True, effects=True, max_gradient_stops=5),
        LightInfo("backline", name="Backline", effects=True),
        LightInfo("floor", name="Floor"),
        LightInfo("stage-all", name="Whole Stage", target_type=TargetType.GROUPED_LIGHT),
    ]


@pytest.fixture
def service(scheduler, tempo, event_bus, lights):
    svc = PerformanceService(
        scheduler=scheduler,
        tempo=tempo,
        resolver=TriggerResolver(),
        generator=AnimationGenerator(),
        event_bus=event_bus,
    )
    svc.set_lights(lights)
    return svc
