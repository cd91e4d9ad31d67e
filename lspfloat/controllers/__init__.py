from .float_controller import FloatController

__all__ = ["FloatController"]
