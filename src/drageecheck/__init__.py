"""drageecheck - architecture conformance rules over dragee graphs."""

__version__ = "0.3.0"
