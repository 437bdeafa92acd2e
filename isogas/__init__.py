"""ISOGas — gas mixture unit conversion following ISO 14912."""

__app_name__ = "isogas"
__version__ = "0.1.0"
