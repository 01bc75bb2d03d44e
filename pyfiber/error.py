class Error(Exception):
    pass


class RpcError(Error):
    # The node answered with a JSON-RPC error object.
    pass


class NotFound(Error):
    pass


class DecodeError(Error):
    # An RPC result does not have the documented shape.
    pass
