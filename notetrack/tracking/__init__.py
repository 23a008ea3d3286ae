"""Tracking layer - from pitch estimates to note events."""

from .decision import NoteDecision, TrackedNoteState

__all__ = ["NoteDecision", "TrackedNoteState"]
