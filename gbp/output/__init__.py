"""Console output and report rendering."""

from .console import ConsoleProtocol, MockConsole, RichConsole, Style
from .render import render_snapshot

__all__ = ["ConsoleProtocol", "MockConsole", "RichConsole", "Style", "render_snapshot"]
