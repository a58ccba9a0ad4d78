"""
Domain errors

Every service raises a subclass of MarketplaceError. The API layer renders
them with a single exception handler using ``status_code``.
"""


class MarketplaceError(Exception):
    """Base exception for marketplace errors"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MarketplaceError):
    """Raised when an item, question or user doesn't exist"""
    status_code = 404


class ForbiddenError(MarketplaceError):
    """Raised when the caller may not act on the resource (self-bid, non-owner answer)"""
    status_code = 403


class UnauthenticatedError(MarketplaceError):
    """Raised when no valid session token is supplied"""
    status_code = 401


class InvalidInputError(MarketplaceError):
    """Raised when input violates a model invariant"""
    status_code = 400


class InvalidBidError(InvalidInputError):
    """Raised when a bid does not exceed the current floor"""
    pass


class ConflictError(MarketplaceError):
    """Raised when the request conflicts with the resource's current state"""
    status_code = 409


class AuctionClosedError(ConflictError):
    """Raised when bidding on an item past its closing time"""
    pass


class QuestionAlreadyAnsweredError(ConflictError):
    """Raised when answering a question that already has an answer"""
    pass


class StorageFailureError(MarketplaceError):
    """Raised when the underlying store fails. Never retried by the core."""
    status_code = 500


class ItemBusyError(StorageFailureError):
    """Raised when the per-item lock can't be acquired in time"""
    status_code = 503
