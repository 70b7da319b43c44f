"""
Disperse/collect API.

Resolves fractional or absolute distribution requests against live
balances and allowances, then submits a single batched transaction to the
DisperseCollect contract.
"""
