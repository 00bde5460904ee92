from casegraph.services.alibi.alibi_tracker import (
    AlibiTracker,
    detect_event_conflicts,
    detect_inconsistencies,
    locations_match,
)

__all__ = ["AlibiTracker", "detect_event_conflicts", "detect_inconsistencies", "locations_match"]
