"""
UserBank Exception Hierarchy

All exceptions inherit from UserBankError for easy catching.
Caller-visible rejections inherit from RejectedCallError; a rejected
call never leaves partial state behind.
"""


class UserBankError(Exception):
    """Base exception for all UserBank errors"""
    
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ValidationError(UserBankError):
    """Raised when an argument has the wrong type or range"""
    pass


class StateError(UserBankError):
    """Raised when the state file cannot be read, written or trusted"""
    pass


class ConfigError(UserBankError):
    """Raised when configuration is malformed"""
    pass


class RejectedCallError(UserBankError):
    """Raised when the ledger rejects a call; state is left unchanged"""
    pass


class AlreadyRegisteredError(RejectedCallError):
    """Raised when an identity registers a second time"""
    
    def __init__(self, message: str = "User already registered", details: dict = None):
        super().__init__(message, details)


class NotRegisteredError(RejectedCallError):
    """Raised when an unregistered identity deposits or withdraws"""
    
    def __init__(self, message: str = "User not registered", details: dict = None):
        super().__init__(message, details)


class InsufficientBalanceError(RejectedCallError):
    """Raised when a withdrawal exceeds the account balance"""
    
    def __init__(self, message: str = "Insufficient balance", details: dict = None):
        super().__init__(message, details)


class NotOwnerError(RejectedCallError):
    """Raised when anyone but the administrator reads a profile"""
    
    def __init__(self, message: str = "Only owner can call this function", details: dict = None):
        super().__init__(message, details)


class TransferFailedError(RejectedCallError):
    """Raised when the outbound value transfer of a withdrawal fails"""
    
    def __init__(self, message: str = "Transfer failed", details: dict = None):
        super().__init__(message, details)


class InsufficientFundsError(RejectedCallError):
    """Raised when a host wallet cannot cover the value attached to a deposit"""
    
    def __init__(self, message: str = "Insufficient funds", details: dict = None):
        super().__init__(message, details)
