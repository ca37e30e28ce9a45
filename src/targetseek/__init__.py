"""targetseek - reactive search/approach/avoid controller for a wheeled robot."""

__version__ = "0.1.0"
