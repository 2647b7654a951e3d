"""
Command-line interface for IPO Data Hub.
"""
