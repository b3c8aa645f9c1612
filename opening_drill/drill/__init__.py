"""Drill session state machine."""

from opening_drill.drill.session import BoardView, DrillSession, DrillState, Feedback

__all__ = ["BoardView", "DrillSession", "DrillState", "Feedback"]
