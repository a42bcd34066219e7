# src/onu_client/errors.py

class ClientError(Exception):
    """Base exception for client-side errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

# Specific error codes
CONFIG_INVALID = "CONFIG_INVALID"
CONNECTION_FAILED = "CONNECTION_FAILED"
CALL_FAILED = "CALL_FAILED"
CALL_TIMEOUT = "CALL_TIMEOUT"
JOIN_REJECTED = "JOIN_REJECTED"


class ConfigError(ClientError):
    def __init__(self, message: str):
        super().__init__(CONFIG_INVALID, message)


class ChannelError(ClientError):
    def __init__(self, message: str):
        super().__init__(CONNECTION_FAILED, message)


class CallError(ClientError):
    """A correlated call was answered with an error reason."""
    def __init__(self, event: str, reason):
        self.event = event
        self.reason = reason
        super().__init__(CALL_FAILED, f"{event} failed: {reason}")


class CallTimeout(ClientError):
    def __init__(self, event: str, timeout: float):
        self.event = event
        super().__init__(CALL_TIMEOUT, f"{event} got no answer within {timeout}s")


class JoinError(ClientError):
    """The server refused the join handshake."""
    def __init__(self, reason):
        self.reason = reason
        super().__init__(JOIN_REJECTED, f"There was an error joining the lobby: {reason}")
