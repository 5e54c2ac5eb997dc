from rentcore_backend.extensions import db

from .user import Profile
from .shop import Complex, Shop
from .renter import Renter, RenterShop
from .payment import RentPayment

__all__ = ["db", "Profile", "Complex", "Shop", "Renter", "RenterShop", "RentPayment"]
