"""
Ethereum layer: hex codec, wire types, method table and the domain client.

Callers work with ints and lowercase hex strings; the JSON-RPC transport
underneath only ever sees wire-encoded values.
"""
