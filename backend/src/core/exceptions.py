"""
Custom Exception Hierarchy
Domain and application-level exceptions
"""


class DomainException(Exception):
    """Base exception for all domain errors"""
    pass


class NotAuthenticatedException(DomainException):
    """Operation attempted without a connected wallet"""
    
    def __init__(self, message: str = "Wallet not connected"):
        super().__init__(message)


class ValidationException(DomainException):
    """Data validation failed"""
    
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class PersistenceException(DomainException):
    """Record store rejected or could not service a request"""
    pass


class RecordNotFoundException(PersistenceException):
    """Requested record not found under the current owner"""
    
    def __init__(self, resource_type: str, identifier: str):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} not found: {identifier}")
