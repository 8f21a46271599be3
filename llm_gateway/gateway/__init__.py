"""Routing-and-translation core of the LLM Gateway.

Provides:
  - Vendor-neutral domain types (requests, responses, model catalog)
  - A five-kind error taxonomy shared by every component
  - Key resolution (environment or in-memory)
  - Vendor adapters (OpenAI and OpenAI-compatible vendors)
  - The dispatcher that routes a request to the adapter owning its model
"""
