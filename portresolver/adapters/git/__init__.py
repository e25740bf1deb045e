"""Version control adapters for historical baselines and port trees."""

from .checkout import GitCheckout

__all__ = ["GitCheckout"]
