from .node_lock import (
    NodeLock as NodeLock,
    NodeLockedError as NodeLockedError,
)
from .storm_node import StormNode as StormNode
