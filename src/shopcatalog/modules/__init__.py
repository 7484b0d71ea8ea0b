"""Feature modules: upstream connectors and the product catalog."""
