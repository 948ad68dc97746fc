"""
Application services.

resolution.py is the composition root for the page resolution layer.
"""
