"""
Only the root tests directory carries an __init__.py.

It makes `tests` a package so shared helpers import as `tests.helpers...`.
Test subdirectories work as namespace packages (PEP 420), so test module
basenames must stay unique across the whole tree.
"""
