from .hello_message import HelloMessage as HelloMessage
from .node_options import NodeOptions as NodeOptions
