"""
Build engine — the in-process host build framework.

Module types register factories; declarations are expanded in a load
phase, wired in a dependency phase and turned into build edges in an
action phase.  The executor then runs those edges incrementally.
"""
