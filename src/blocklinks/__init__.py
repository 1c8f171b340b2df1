__all__ = [
    # Clients
    "EthClient",
    "AsyncEthClient",
    # Transport
    "RpcTransport",
    "AsyncRpcTransport",
    # Configuration
    "EndpointConfig",
    "DEFAULT_URL",
    "DEFAULT_TIMEOUT",
    # Wire types
    "Block",
    "CompileOutput",
    "CompiledContract",
    "Log",
    "Transaction",
    "TransactionCall",
    "TransactionReceipt",
    # Hex codec
    "decode_data",
    "decode_quantity",
    "encode_data",
    "encode_quantity",
    "normalize_address",
    # Errors
    "BlocklinksError",
    "CodecError",
    "ConfigError",
    "DecodeError",
    "ProtocolError",
    "RpcError",
    "TransportError",
    "TransportErrorKind",
]

from .config import DEFAULT_TIMEOUT, DEFAULT_URL, EndpointConfig
from .errors import (
    BlocklinksError,
    CodecError,
    ConfigError,
    DecodeError,
    ProtocolError,
    RpcError,
    TransportError,
    TransportErrorKind,
)
from .eth.client import AsyncEthClient, EthClient
from .eth.hexcodec import (
    decode_data,
    decode_quantity,
    encode_data,
    encode_quantity,
    normalize_address,
)
from .eth.wire import (
    Block,
    CompileOutput,
    CompiledContract,
    Log,
    Transaction,
    TransactionCall,
    TransactionReceipt,
)
from .jsonrpc.transport import AsyncRpcTransport, RpcTransport
