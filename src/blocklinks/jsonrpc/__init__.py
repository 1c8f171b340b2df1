"""
JSON-RPC 2.0 over HTTP.

``envelope`` frames requests and validates responses; ``transport`` owns
the pooled httpx client and maps network failures onto ``TransportError``.
"""
