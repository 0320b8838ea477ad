from enum import Enum

class DiscountType(str, Enum):
    PERCENTAGE = "PERCENTAGE"       # Percentage of the subtotal
    FIXED_AMOUNT = "FIXED_AMOUNT"   # Flat amount, never above the subtotal
