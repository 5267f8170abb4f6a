"""Command line tools for Cryptopack."""
