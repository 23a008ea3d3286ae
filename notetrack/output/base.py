"""Base class for note event consumers."""


class NoteConsumer:
    """
    Receiver of note events. Subclasses override what they need; every
    method defaults to doing nothing.
    """

    def note_on(self, note: int, velocity: int) -> None:
        pass

    def note_off(self, note: int) -> None:
        pass

    def pitch_bend(self, value: float) -> None:
        """Normalized bend, -1.0 to 1.0."""
        pass

    def status(self, note_name: str, frequency: float) -> None:
        """Display-only status update."""
        pass

    def close(self) -> None:
        pass
