from .control_event_bus import (
    ControlEventBus as ControlEventBus,
    ControlHandler as ControlHandler,
)
from .models import ControlEvent as ControlEvent
