"""
Business Logic Services
"""
from marketplace.services.auction_service import AuctionService
from marketplace.services.bid_service import BidService
from marketplace.services.category_service import CategoryService
from marketplace.services.ledger import LedgerStore
from marketplace.services.query_service import QueryService, ListingStatus
from marketplace.services.question_service import QuestionService
from marketplace.services.user_service import UserService

__all__ = [
    "AuctionService",
    "BidService",
    "CategoryService",
    "LedgerStore",
    "QueryService",
    "ListingStatus",
    "QuestionService",
    "UserService",
]
