"""
storefront — cart and checkout client for the shop REST backend.

    from storefront import repo as R       # Backend collections
    from storefront import cart as K       # The customer's cart
    from storefront import checkout as CO  # Cart → bill, order, order lines
    from storefront import saga as S       # Forward-only multi-step creation
"""

from storefront import config
from storefront import pricing
from storefront import repo
from storefront import saga
from storefront import cart
from storefront import checkout
from storefront import profile
from storefront import lift

__version__ = "0.1.0"

__all__ = (
    "config",
    "pricing",
    "repo",
    "saga",
    "cart",
    "checkout",
    "profile",
    "lift",
)
