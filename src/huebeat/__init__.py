"""
huebeat - MIDI-driven, tempo-synchronized light performance engine
"""

__version__ = "0.1.0"
