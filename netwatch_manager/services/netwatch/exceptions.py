"""
Custom exceptions for the netwatch gateway module.

Messages carry the transport's own wording (``timed out``, ``ECONNREFUSED``,
``cannot log in`` ...) so callers can classify them by text.
"""

class GatewayError(Exception):
    """Base exception of the gateway module"""
    pass

class GatewayConnectionError(GatewayError):
    """Raised when the router cannot be reached"""
    pass

class GatewayAuthenticationError(GatewayError):
    """Raised when the router rejects the credentials"""
    pass

class GatewayTimeoutError(GatewayError):
    """Raised when the router does not answer in time"""
    pass

class GatewayAPIError(GatewayError):
    """Raised when a command is rejected or the response cannot be parsed"""
    pass

class GatewayUnsupportedError(GatewayError):
    """Raised for an unknown backend or command"""
    pass
