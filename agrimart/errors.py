"""
Common Error Constants

Centralized error messages shared by the cart and checkout layers.
"""

# Cart errors
ERROR_CART_EMPTY = "Cart is empty"
ERROR_CART_LOCKED = "Cart is locked while an order is being submitted"
ERROR_INVALID_QUANTITY = "Quantity must be a positive integer"

# Product errors
ERROR_PRODUCT_NOT_FOUND = "Product not found"
ERROR_PRODUCT_OUT_OF_STOCK = "Product out of stock"

# Contact form errors
ERROR_NAME_REQUIRED = "Full name is required"
ERROR_PHONE_REQUIRED = "Phone number is required"
ERROR_ADDRESS_REQUIRED = "Delivery address is required"
ERROR_CONTACT_INVALID = "Please fill in all contact fields"

# Checkout errors
ERROR_INVALID_TRANSITION = "Invalid checkout transition"
ERROR_SUBMISSION_IN_PROGRESS = "Order submission already in progress"
ERROR_ORDER_FAILED = "Order placement failed"
ERROR_ORDER_TIMEOUT = "Order placement timed out"
