"""Monetary domain package.

This package contains classes for handling monetary amounts and currencies:
Currency definitions, the integer-scaled `ScaledMoney` engine with exact
precision-aware arithmetic, and the Decimal-backed `Money` used for balances.
"""
