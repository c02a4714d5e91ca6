"""Reusable patterns shared by the verticals.

Each module is a self-contained pattern that can be adapted to any
domain: async repository layers and pure-function rule evaluation.
"""
