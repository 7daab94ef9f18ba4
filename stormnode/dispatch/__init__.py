from .command_dispatcher import CommandDispatcher as CommandDispatcher
from .models import (
    CommandEnvelope as CommandEnvelope,
    CommandType as CommandType,
)
