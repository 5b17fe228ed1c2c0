"""
Broadcast Relay Exceptions

Error taxonomy shared by the hub, the peer and the command line
"""


class RelayError(Exception):
    """Base broadcast relay exception"""

    def __init__(self, message: str, error_code: str = "RELAY000", details: dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {
            "error_code": self.error_code,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class BindError(RelayError):
    """Hub listener could not be started"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, "BIND001", details)


class ConnectError(RelayError):
    """Peer could not reach the hub"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, "CONN001", details)


class TransportError(RelayError):
    """I/O or protocol fault on a single open connection"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, "TRAN001", details)


class UsageError(RelayError):
    """Bad or missing command line input"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, "USAGE001", details)
