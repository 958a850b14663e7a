"""HTTP endpoint for termengine.

Serves one engine session over HTTP so a page widget (or a test) can
submit lines and key events and read back the rendered screen.
"""
