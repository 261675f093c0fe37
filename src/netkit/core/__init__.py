"""Client execution engine for netkit."""

from .client import NetworkClient
from .stream import TransferStream

__all__ = ["NetworkClient", "TransferStream"]
