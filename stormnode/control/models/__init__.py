from .control_event import ControlEvent as ControlEvent
