"""
IOU Kernel - event-sourced mutual IOU ledger.

An append-only ledger of Open / Topup / Transfer events with:
- Validated, immutable event constructors
- Pure replay of the whole ledger into account states
- FIFO settlement of linked debt/credit pairs
- Conservation and linkage invariant checks
"""

__version__ = "0.1.0"
