# SPDX-License-Identifier: MIT
"""Toolchain description and process invocation."""
