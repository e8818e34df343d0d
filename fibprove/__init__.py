"""
fibprove - proof orchestration for the Fibonacci guest program

Drives a zero-knowledge proving service:
- Local CPU prover or remote prover network
- Execution with output consistency checks
- Synchronous and asynchronous prove/verify
- EVM proof fixtures for on-chain verifiers
"""

__version__ = "0.1.0"
