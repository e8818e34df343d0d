"""Guest program, its runtime, and its input/output codec"""
from fibprove.core.program.codec import (
    ProgramStdin,
    PublicValues,
    encode_input,
    decode_public_values,
    PUBLIC_VALUES_SIZE,
)
from fibprove.core.program.guest import (
    GuestProgram,
    GuestEnv,
    ExecutionReport,
    run_guest,
)
from fibprove.core.program.fibonacci import (
    FIBONACCI_PROGRAM,
    fibonacci,
)

__all__ = [
    "ProgramStdin",
    "PublicValues",
    "encode_input",
    "decode_public_values",
    "PUBLIC_VALUES_SIZE",
    "GuestProgram",
    "GuestEnv",
    "ExecutionReport",
    "run_guest",
    "FIBONACCI_PROGRAM",
    "fibonacci",
]
