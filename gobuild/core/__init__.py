# SPDX-License-Identifier: MIT
"""Package model, scheduling and target selection."""
