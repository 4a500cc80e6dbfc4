"""
Shared constants and helper utilities.

Centralizes the physical defaults of the reference arm, tunable-parameter
key names, render colours, and small stateless helpers used across the
arm_sim package.
"""
