# mercator/errors.py
"""
Error taxonomy shared by the gateway, codec and orchestrators.

    MercatorError
    ├── RpcError
    │   ├── TransportError   network / timeout reaching the node
    │   └── ProtocolError    node answered with an error object or a bad envelope
    ├── DecodeError          malformed hex, short buffer, bounds or width violation
    └── ValidationError      malformed user input (address, url, chain id)
"""


class MercatorError(Exception):
    """Base class for every error raised on purpose by mercator."""


class RpcError(MercatorError):
    pass


class TransportError(RpcError):
    def __str__(self):
        return f"rpc transport error: {self.args[0] if self.args else ''}"


class ProtocolError(RpcError):
    def __str__(self):
        return f"rpc returned error: {self.args[0] if self.args else ''}"


class DecodeError(MercatorError):
    def __str__(self):
        return f"decode error: {self.args[0] if self.args else ''}"


class ValidationError(MercatorError):
    pass
