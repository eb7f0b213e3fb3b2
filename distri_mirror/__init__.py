"""Off-chain relational mirror of the DistriAI program state."""

__version__ = "0.1.0"
