"""DojoDesk: subscription lifecycle and attendance accounting for a martial-arts school."""

__version__ = "0.1.0"
