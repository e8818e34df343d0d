"""
Fibonacci guest program.

Computes the (n)th and (n+1)th Fibonacci numbers modulo 7919 and commits
(n, a, b) as ABI-encoded public values.
"""

from typing import Tuple

from fibprove.core.program.codec import PublicValues
from fibprove.core.program.guest import GuestEnv, GuestProgram

FIB_MODULUS = 7919


def fibonacci(n: int) -> Tuple[int, int]:
    """Reference implementation, used to check guest outputs."""
    a, b = 0, 1
    for _ in range(n):
        a, b = b, (a + b) % FIB_MODULUS
    return a, b


def main(env: GuestEnv) -> None:
    n = env.read_u32()

    a, b = 0, 1
    for _ in range(n):
        a, b = b, (a + b) % FIB_MODULUS
        env.step(4, label="fibonacci")

    env.commit_slice(PublicValues(n=n, a=a, b=b).to_bytes())


FIBONACCI_PROGRAM = GuestProgram(name="fibonacci-program", version="1.0.0", entrypoint=main)
