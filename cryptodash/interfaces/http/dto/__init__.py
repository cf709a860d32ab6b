from .auth import LoginForm, RegisterForm, UserDTO
from .markets import HistoryQuery, PriceHistoryDTO, PricePointDTO, TokenPriceDTO

__all__ = [
    "HistoryQuery",
    "LoginForm",
    "PriceHistoryDTO",
    "PricePointDTO",
    "RegisterForm",
    "TokenPriceDTO",
    "UserDTO",
]
