class PromoCodeError(Exception):
    """Base exception for promotional code redemption failures."""
    pass

class PromoCodeNotFoundError(PromoCodeError):
    """Raised when the code to redeem does not exist."""
    pass

class PromoCodeLimitExceededError(PromoCodeError):
    """Raised when a redemption lost the race against the global or per-user limit."""
    pass

class PromoCodeAlreadyRedeemedError(PromoCodeError):
    """Raised when the code was already redeemed for the same order."""
    pass
