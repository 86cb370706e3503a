"""DARAH storefront cart server: session carts reconciled against live inventory."""

__version__ = "0.1.0"
