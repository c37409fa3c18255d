"""
Job Board Agent Backend.

Core components:
- crm: Salesforce token cache and HTTP client
- agent: session coordinator, message relay, session terminator, event bridge
- api: FastAPI app exposing the agent to the browser
"""
