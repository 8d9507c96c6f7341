"""Transport-independent core: models, encoding, sampling and events."""
