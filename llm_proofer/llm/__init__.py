"""Model CLI invocation, output extraction and error types."""
