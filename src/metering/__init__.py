from metering.distance_accumulator import DistanceAccumulator, adjusted_distance
from metering.waiting_clock import WaitingClock

__all__ = ["DistanceAccumulator", "WaitingClock", "adjusted_distance"]
