from enum import Enum


class AuthType(Enum):
    RANDOMSELECT = "randomselect"
    ALL = "all"

    @classmethod
    def parse(cls, value: str | None):
        for auth_type in cls:
            if auth_type.value == value:
                return auth_type

        return None
