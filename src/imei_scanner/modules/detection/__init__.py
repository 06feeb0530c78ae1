from .detector import FullFrameDetector, RegionDetector, YoloxRegionDetector

__all__ = ["RegionDetector", "FullFrameDetector", "YoloxRegionDetector"]
