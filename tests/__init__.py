"""Test package for the pirate math game logic.

Everything under test is headless: clocks are faked per module and
randomness comes from seeded generators, so no test sleeps or depends on
run order.  Run ``pytest`` from the project root.
"""
