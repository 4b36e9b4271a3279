# SPDX-License-Identifier: MIT
"""Utilities."""
