"""Weather station library: sensor decoding, display drawing, LED alerts, a measurement loop and a web dashboard."""

__version__ = "0.1.0"