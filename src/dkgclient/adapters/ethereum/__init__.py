"""Ethereum-compatible chain adapter built on web3.py."""

from __future__ import annotations

from .provider import Web3ChainProvider

__all__ = ["Web3ChainProvider"]
