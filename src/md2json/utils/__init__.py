#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Internal helpers: dependency checks, package version lookups and timing."""
