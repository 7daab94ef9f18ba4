import re

TOPIC_PREFIX = "storm.dev"
GENERAL_TOPIC = f"{TOPIC_PREFIX}/general"

MANAGE_TOPIC_PATTERN = re.compile(
    r"storm\.dev/loadtests/([-_a-z0-9]+)/manage"
)


def direct_topic(node_id: str) -> str:
    return f"{TOPIC_PREFIX}/nodes/{node_id}/direct"


def status_topic(node_id: str) -> str:
    return f"{TOPIC_PREFIX}/nodes/{node_id}/status"


def loadtest_manage_topic(run_uuid: str) -> str:
    return f"{TOPIC_PREFIX}/loadtests/{run_uuid}/manage"


def results_topic(
    kind: str,
    task_id: str | int,
    node_id: str,
) -> str:
    return f"{TOPIC_PREFIX}/{kind}/{task_id}/{node_id}/results"


def wildcard_topic(fragment: str) -> str:
    return f"{TOPIC_PREFIX}/{fragment}/#"


def topic_to_loadtest_uuid(topic: str) -> str | None:
    if match := MANAGE_TOPIC_PATTERN.search(topic):
        return match.group(1)

    return None
