"""Status bar component."""

from prompt_toolkit.layout.controls import FormattedTextControl

STATUS_PREFIX = "[TypeScript Importer]: "


class StatusBar:
    """Status bar showing the indexer state."""

    def __init__(self, hidden: bool = False):
        self.hidden = hidden
        self.index_status = "Initializing"
        self.current_message = ""
        self.control = FormattedTextControl(text=self._format_status())

    def attach(self, engine):
        """Follow status changes of an ImporterEngine."""
        self.set_index_status(engine.status)
        engine.add_status_listener(self.set_index_status)

    def set_message(self, message: str):
        """Set the current status message."""
        self.current_message = message
        self.control.text = self._format_status()

    def set_index_status(self, status: str):
        """Set the index status."""
        self.index_status = status
        self.control.text = self._format_status()

    def _format_status(self) -> str:
        """Format the status bar text."""
        if self.hidden:
            return ""
        status_parts = [STATUS_PREFIX + self.index_status]
        if self.current_message:
            status_parts.append(self.current_message)
        return " | ".join(status_parts)
