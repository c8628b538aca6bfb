"""
Public site - widgets and HTML rendering.
"""
