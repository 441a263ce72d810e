"""Taiwan shindo outlook.

Estimates, per county/city and intensity level, the chance of at least
one felt earthquake within 1, 3, 6 and 9 years from the CWA catalogs.
"""

__version__ = "0.1.0"
