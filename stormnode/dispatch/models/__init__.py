from .command_envelope import CommandEnvelope as CommandEnvelope
from .command_type import CommandType as CommandType
from .commands import (
    CustomCommand as CustomCommand,
    EndpointHealthCommand as EndpointHealthCommand,
    ExecuteCommand as ExecuteCommand,
    HostMonitoringCommand as HostMonitoringCommand,
    ManageLoadtestCommand as ManageLoadtestCommand,
    SetTimeCommand as SetTimeCommand,
    TaskCommand as TaskCommand,
    TopicCommand as TopicCommand,
)
