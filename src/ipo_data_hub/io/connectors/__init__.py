"""Outbound connectors for registrar sites and the allotment aggregator."""
