"""GUI adapter layer.

This package provides thin Qt-shaped adapters over engine services.

Notes
-----
Adapters exist to:
- keep GUI code free of HTTP details,
- keep network calls off the UI thread,
- hand confirmed results back to the GUI thread, which alone mutates the
  record set and the mirror.
"""
