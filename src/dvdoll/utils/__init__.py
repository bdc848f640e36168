"""
Constants, logging and system helpers shared by the probe, remux and session
modules. Callers import the submodules directly.
"""
