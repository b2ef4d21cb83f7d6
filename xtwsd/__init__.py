"""Helpers for XTide station data, a station-definition schema, and the nos2xt import client."""

__version__ = "0.2.0"