"""Derived series, chart groups and threshold evaluation."""
