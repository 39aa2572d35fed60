"""
Record stores for Trip Diary.

Repository interfaces plus their DynamoDB implementations.
"""

from core.db.interface import TravelRepository, UserDirectory
from core.db.travels import DynamoTravelRepository
from core.db.users import DynamoUserDirectory

__all__ = ["DynamoTravelRepository", "DynamoUserDirectory", "TravelRepository", "UserDirectory"]
