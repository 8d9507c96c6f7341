"""asyncio adapters: UDP transports and logging integration."""
