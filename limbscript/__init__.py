"""Stack-machine script generation and execution for big-integer arithmetic on 30-bit limbs."""

__version__ = "0.1.0"
__all__ = ["script", "stack", "add", "sub", "cmp", "bits", "mul", "inv"]