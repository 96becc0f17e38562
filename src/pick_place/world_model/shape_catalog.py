"""Define the catalog of named shapes that can be added to the world model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pick_place.filesystem.load_from_yaml import load_yaml_into_dict
from pick_place.world_model.collision_models import (
    CollisionMesh,
    CollisionPrimitive,
    Geometry,
    ShapeType,
)

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class ShapeDescriptor:
    """A named collision geometry used to build objects added to the world."""

    name: str  # Default object id for objects with this shape
    geometry: Geometry

    @classmethod
    def from_yaml(cls, name: str, shape_data: dict[str, Any]) -> ShapeDescriptor:
        """Construct a ShapeDescriptor from a dictionary of YAML data.

        The data specifies either a primitive ({"type": "box", "dims": [...]}) or a mesh
            resource ({"mesh": "package://pkg/meshes/part.stl"}).

        :raises: KeyError, if neither a primitive nor a mesh is specified
        """
        if "mesh" in shape_data:
            return ShapeDescriptor(name, CollisionMesh(resource=shape_data["mesh"]))
        if "type" in shape_data:
            return ShapeDescriptor(name, CollisionPrimitive.from_yaml(shape_data))

        error = f"Cannot construct shape '{name}' from the YAML data: {shape_data}."
        raise KeyError(error)


def default_shapes() -> dict[str, ShapeDescriptor]:
    """Construct the built-in shapes: a thin cylinder, a large box, and two mesh parts."""
    shapes = [
        ShapeDescriptor("cylinder", CollisionPrimitive(ShapeType.CYLINDER, (0.13, 0.015))),
        ShapeDescriptor("box", CollisionPrimitive(ShapeType.BOX, (0.5, 0.5, 0.5))),
        ShapeDescriptor("epingle", CollisionMesh("package://lwr_pick_n_place/meshes/epingle.stl")),
        ShapeDescriptor("plaque", CollisionMesh("package://lwr_pick_n_place/meshes/plaque.stl")),
    ]
    return {shape.name: shape for shape in shapes}


@dataclass
class ShapeCatalog:
    """A lookup table from shape names to shape descriptors."""

    shapes: dict[str, ShapeDescriptor] = field(default_factory=default_shapes)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> ShapeCatalog:
        """Construct a catalog extending the built-in shapes with those under the "shapes" key."""
        yaml_data = load_yaml_into_dict(yaml_path)
        shapes = default_shapes()
        for name, shape_data in yaml_data.get("shapes", {}).items():
            shapes[name] = ShapeDescriptor.from_yaml(name, shape_data)
        return ShapeCatalog(shapes)

    def get(self, name: str) -> ShapeDescriptor:
        """Retrieve the named shape.

        :raises: KeyError, if the shape is unknown
        """
        if name not in self.shapes:
            raise KeyError(f"Unknown shape: '{name}'. Known shapes: {sorted(self.shapes)}.")
        return self.shapes[name]
