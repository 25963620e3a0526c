"""Collidify - Compile vector level designs into physics colliders.

Collidify is a CLI tool and library that turns a design-tool scene snapshot
(frames named ``LevelBlock:*`` holding groups named ``GameObject:*``) into a
document of physics-engine-ready colliders: boxes, balls, convex hulls,
triangle meshes, polylines and nested compounds, expressed in a centered,
Y-up coordinate system and scaled to physics units.

Example:
    $ collidify level.scene.json --ppu 32

This will create level.scene.colliders.json next to the input.
"""

__version__ = "0.1.0"
__author__ = "Collidify contributors"

__all__ = ["__author__", "__version__"]
