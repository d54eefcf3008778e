"""Raymote - web bridge for a USB infrared receiver and transmitter."""

__version__ = "0.1.0"
