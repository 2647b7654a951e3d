"""
IPO allotment domain package.

Holds the request/result data contracts, the status classification rules and
the dispatcher/service that fan a lookup out to registrar checkers. Outbound
HTTP lives in ipo_data_hub.io; collaborators are injected.
"""
