"""AWS core modules."""

from .ec2 import EC2Manager, create_ec2_manager
from .proxy import ProxyClient

__all__ = [
    "EC2Manager",
    "create_ec2_manager",
    "ProxyClient",
]
