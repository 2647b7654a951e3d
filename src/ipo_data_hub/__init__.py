"""
IPO Data Hub - IPO allotment status aggregation.

Queries the allotment pages of the Indian IPO registrars and an
allotment aggregator, and normalizes their heterogeneous responses into a
single allotment-status taxonomy.
"""

__version__ = "0.1.0"
