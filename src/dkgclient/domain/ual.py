"""Universal Asset Locator encoding and decoding.

A UAL ties an on-chain token to an off-chain graph asset::

    did:dkg:<blockchain>/<contract>/<tokenId>

Blockchain and contract are lower-cased on the way out. Blockchains whose name
starts with ``otp`` collapse to ``otp``; a ``::`` network separator
(``polygon::testnet``) is written as a single ``:`` so the locator still decodes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .errors import FormatError

UAL_PREFIX: Final[str] = "did:dkg:"
RESERVED_CHAIN_PREFIX: Final[str] = "otp"


@dataclass(frozen=True, slots=True)
class UAL:
    blockchain: str
    contract: str
    token_id: int

    def __str__(self) -> str:
        return derive_ual(self.blockchain, self.contract, self.token_id)


def normalize_blockchain(blockchain: str) -> str:
    if blockchain.startswith(RESERVED_CHAIN_PREFIX):
        return RESERVED_CHAIN_PREFIX
    return blockchain.lower().replace("::", ":")


def derive_ual(blockchain: str, contract: str, token_id: int) -> str:
    return f"{UAL_PREFIX}{normalize_blockchain(blockchain)}/{contract.lower()}/{token_id}"


def resolve_ual(ual: str) -> UAL:
    """Parse a UAL string.

    ``did:dkg:otp:2043/0xabc/7`` has a chain id after the reserved prefix, which
    adds a fourth ``:`` segment; it is folded back into the blockchain field
    (``otp:2043``) before the path is split. Encoded network names such as
    ``polygon:testnet`` take the same route.
    """

    if not ual.startswith(UAL_PREFIX):
        raise FormatError(f"UAL doesn't have correct format: {ual}")

    segments = ual.split(":")
    if len(segments) == 3:
        args_string = segments[2]
    elif len(segments) == 4:
        args_string = f"{segments[2]}:{segments[3]}"
    else:
        raise FormatError(f"UAL doesn't have correct format: {ual}")

    args = args_string.split("/")
    if len(args) != 3 or not all(args):
        raise FormatError(f"UAL doesn't have correct format: {ual}")

    blockchain, contract, raw_token_id = args
    if not raw_token_id.isdigit():
        raise FormatError(f"UAL token id must be a non-negative integer: {ual}")

    return UAL(blockchain=blockchain, contract=contract, token_id=int(raw_token_id, 10))
