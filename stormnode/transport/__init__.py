from .mqtt_transport import MQTTTransport as MQTTTransport
from .topics import (
    GENERAL_TOPIC as GENERAL_TOPIC,
    MANAGE_TOPIC_PATTERN as MANAGE_TOPIC_PATTERN,
    TOPIC_PREFIX as TOPIC_PREFIX,
    direct_topic as direct_topic,
    loadtest_manage_topic as loadtest_manage_topic,
    results_topic as results_topic,
    status_topic as status_topic,
    topic_to_loadtest_uuid as topic_to_loadtest_uuid,
    wildcard_topic as wildcard_topic,
)
from .transport import (
    Transport as Transport,
    TransportError as TransportError,
    TransportMessage as TransportMessage,
)
