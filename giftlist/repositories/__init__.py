from giftlist.repositories.gifts import GiftRepository
from giftlist.repositories.persons import PersonRepository
from giftlist.repositories.users import UserRepository

__all__ = ["GiftRepository", "PersonRepository", "UserRepository"]
