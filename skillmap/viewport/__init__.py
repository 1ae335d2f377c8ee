from .controller import CLICK_SLOP, MAX_Z, MIN_Z, WHEEL_FACTOR, ViewportController

__all__ = ["CLICK_SLOP", "MAX_Z", "MIN_Z", "WHEEL_FACTOR", "ViewportController"]
