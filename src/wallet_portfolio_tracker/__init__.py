"""Track token holdings of EVM and Solana wallets with USD valuations."""

__version__ = "0.1.0"
