"""MQTT bridge for LG webOS TV control."""

__version__ = "2.0.0"
