"""
Bundled probers. Each one runs inside a worker and talks to the engine
only through the probe protocol.
"""

from artco.monitoring.worker import Prober
from artco.probers.echo import EchoProber
from artco.probers.http import HttpProber
from artco.probers.tcp import TcpProber

__all__ = [
    "Prober",
    "EchoProber",
    "HttpProber",
    "TcpProber",
]
