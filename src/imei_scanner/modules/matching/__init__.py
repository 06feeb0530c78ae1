from .matcher import IMEI_LENGTH, IMEIMatcher, find_candidates, is_imei

__all__ = ["IMEI_LENGTH", "IMEIMatcher", "find_candidates", "is_imei"]
