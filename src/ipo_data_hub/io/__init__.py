"""I/O layer: outbound HTTP connectors to registrar and aggregator sites."""
