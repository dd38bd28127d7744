"""Render-on-message viewer."""

from iss_stream.viewer.session import ViewerSession
from iss_stream.viewer.window import ViewerRow, ViewerWindow, render_row

__all__ = ["ViewerRow", "ViewerSession", "ViewerWindow", "render_row"]
