from enum import Enum

class InvalidReason(str, Enum):
    NOT_FOUND = "code not found"
    INACTIVE = "code inactive"
    EXPIRED = "expired"
    NOT_YET_VALID = "not yet valid"
    BELOW_MINIMUM = "minimum not met"
    NOT_APPLICABLE = "not applicable to cart contents"
    GLOBAL_LIMIT_REACHED = "redemption limit reached"
    USER_LIMIT_REACHED = "already used by this user"
