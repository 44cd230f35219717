"""Storefront client state synchronization."""
