"""
Amount resolution, funds validation and batch assembly.

Everything in here except fetcher/submitter/service is synchronous and
free of I/O.
"""
