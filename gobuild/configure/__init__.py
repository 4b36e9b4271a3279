# SPDX-License-Identifier: MIT
"""Build configuration and environment discovery."""
