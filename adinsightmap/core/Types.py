from enum import Enum


class NodeKind(Enum):
    ROOT = "root"
    COMPETITOR = "competitor"


class Platform(Enum):
    META = "meta"
    GOOGLE = "google"
    NAVER = "naver"
    FACEBOOK = "facebook"
    MOCK = "mock"


class LayoutDirection(Enum):
    TOP_BOTTOM = "TB"
    LEFT_RIGHT = "LR"

    @staticmethod
    def parse(value) -> 'LayoutDirection':
        if isinstance(value, LayoutDirection):
            return value
        try:
            return LayoutDirection(str(value).upper())
        except ValueError:
            raise ValueError(f"Unknown layout direction '{value}' (expected TB or LR)")
