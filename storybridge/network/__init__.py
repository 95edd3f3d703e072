"""Visualization formatting for graph query results."""

from storybridge.network.formatter import NetworkFormatter, NetworkModel, VisLink, VisNode

__all__ = ["NetworkFormatter", "NetworkModel", "VisLink", "VisNode"]
