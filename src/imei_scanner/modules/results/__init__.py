from .accumulator import IMEIAccumulator

__all__ = ["IMEIAccumulator"]
