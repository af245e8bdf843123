"""Per-network probes."""

from chaincompare.probes.base import Narrator, Probe, Receipt
from chaincompare.probes.contract import ContractProbe
from chaincompare.probes.ledger import LedgerProbe
from chaincompare.probes.metered import MeteredProbe

__all__ = [
    "ContractProbe",
    "LedgerProbe",
    "MeteredProbe",
    "Narrator",
    "Probe",
    "Receipt",
]
