"""
Horizon Creature Simulation

A turn-based simulation of creatures on a one-dimensional horizon.
Creatures drift by random displacement, collide and merge into gold-carrying
clusters, and are hunted by a single guardian until one survivor remains.

Architecture: the Horizon value is the source of truth. Callers hold it
between turns and pass it back to the engine on every call.
"""

__version__ = "0.1.0"
