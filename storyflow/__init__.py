"""
storyflow - branching narrative playback engine

Evaluates edge conditions, walks a story graph and checks that a graph is
ready for playback.
"""

__version__ = "0.1.0"
