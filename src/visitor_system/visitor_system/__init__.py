"""Visitor System package.

This package is organized by feature modules (visitors, preapprovals, hosts, audit, ...)
with a thin Flask controller layer and service/repository layers over an explicit
in-memory store.
"""
