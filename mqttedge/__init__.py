"""MQTT subscribe/unsubscribe handling, subscription stores, client options and bench helpers."""

__version__ = "0.1.0"