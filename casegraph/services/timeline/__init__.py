from casegraph.services.timeline.event_builder import EventBuilder

__all__ = ["EventBuilder"]
