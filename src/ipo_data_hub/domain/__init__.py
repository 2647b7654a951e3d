"""IPO Data Hub domain layer.

Domain modules hold the allotment taxonomy, classification rules and the
dispatch logic. They depend on the standard library and pydantic only and
must never import from ``ipo_data_hub.io``; registrar checkers and resolvers
are injected by the infrastructure factory.
"""
