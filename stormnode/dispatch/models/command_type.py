from enum import Enum


class CommandType(Enum):
    LOADTEST = "loadtest"
    MANAGE_LOADTEST = "manageloadtest"
    ENDPOINT_HEALTH = "endpointhealth"
    HOST_MONITORING = "hostmonitoring"
    CUSTOM_COMMAND = "customcommand"
    SUBSCRIBE_TOPIC = "subscribetopic"
    UNSUBSCRIBE_TOPIC = "unsubscribetopic"
    SET_TIME = "settime"
    EXECUTE = "execute"

    @classmethod
    def parse(cls, value: str | None):
        for command_type in cls:
            if command_type.value == value:
                return command_type

        return None
