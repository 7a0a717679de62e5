# perseus

Building blocks for region-based 3D object pose tracking. With this package you
can project a triangle mesh through a calibrated camera under a given pose and
rasterise it in software into colour, depth and object-id buffers. You can also
refine poses by gradient descent, driven by an energy function that you supply.
Everything runs on the CPU with NumPy.

## Installation

```
pip install .
```

To install with the test dependencies:

```
pip install .[test]
```

## Modules

- `perseus.vectors`: `Vector2D`, `Vector3D` and `Vector4D` dataclasses. They
  support `+`, `-`, scalar `*`, `dot` and iteration. `Vector2D` and `Vector3D`
  also have `cross`, and `Vector3D` has `norm` and `copy_into`. `Pixel` is an
  RGBA pixel whose channels are reduced to bytes, and `Pixel.filled(value)`
  builds one with all four channels equal.
- `perseus.image`: `Image(width, height, dtype=np.uint8, channels=1)`, a pixel
  buffer backed by a NumPy array of shape `(height, width)` or
  `(height, width, channels)`. An integer index addresses pixels in row-major
  order, and a tuple index goes straight to the array. `clear(value)` fills
  every byte with the low byte of `value`.
- `perseus.timer`: `Timer`, which reports CPU time for runs under an hour and
  wall-clock time for longer runs. It has `start`, `restart`, `stop`,
  `check(msg, count)` and `elapsed_time`, and a `total` property. It can be
  used as a context manager, which restarts the timer on entry and stops it on
  exit.
- `perseus.lines`: `draw_line(image, x1, y1, x2, y2, color)` is a fixed-point
  line rasteriser that clamps every point to the image border. `sgn` is also
  here.
- `perseus.quaternion`: `Quaternion`, which defaults to the identity. It
  converts from Euler angles in degrees (`set_from_euler`) and to them
  (`to_euler`), and from a row-major 3x3 matrix (`set_from_matrix`).
  `opengl_matrix` gives the 4x4 rotation as 16 column-major values. It has
  `*`, `add`, `add_post`, `sum_of`, `normalize`, `invert`, `copy`,
  `copy_into` and `from_point_and_reference`. `derivatives` gives the
  gradient of the energy with respect to the four quaternion components.
- `perseus.object_transform`: `ObjectTransform`, an object pose made of a
  translation and a rotation. It is set with `set_from_euler`,
  `set_from_quaternion`, `set_from_array` (seven values) or `set_from`.
  `model_view_matrix` returns 16 column-major values.
- `perseus.camera`: `Camera`, a pinhole camera with an optional FOV-model
  distortion. It has `project` and `unproject`. `Camera.from_file` reads a
  whitespace-separated calibration file with these fields:
  `name size_x size_y fx fy cx cy`.
- `perseus.camera_transform`: `decompose_k_matrix`, `ProjectionParams` and
  `CameraTransform`. A `CameraTransform` builds projection matrices from a
  camera (`set_from_camera`), from a calibration file (`set_from_file`) or from
  a field of view (`set_perspective`). It gives `projection_parameters()` and
  `inverse_projection()`. `set_from_camera` raises `ValueError` unless both
  clipping distances are positive.
- `perseus.coordinate_transform`: `CoordinateTransform`, which combines a
  projection, a translation, a shared rotation quaternion and a viewport. It
  has `model_view_matrix`, `pm_matrix`, `inverse_pm_matrix` and
  `inverse_projection`. `model_view_matrix` raises `ValueError` until
  `set_rotation` has been called.
- `perseus.model`: `parse_obj(stream)` and `Model.from_path(path)` read
  Wavefront OBJ text. They use `v`, `g`/`o` and `f` records, take the vertex
  index from tokens such as `3/1/2`, and ignore everything else. Faces that
  come before any group are put into a group named `default`. A file without
  vertices or with a malformed vertex or face raises `ValueError`. `Model`
  provides `clone`, `face_vertex_buffer`, and `to_drawing_model`, which returns
  a per-view `DrawingModel`. `Face` and `Group` hold the mesh structure.
- `perseus.render_objects`: `RenderObject` is a model with one
  `ObjectTransform` and one `DrawingModel` for each view. `RenderView` is a
  camera with its `CameraTransform`, its projection parameters, its inverse
  projection and its viewport. It is built with `RenderView.from_calibration`
  or `RenderView.from_intrinsics`.
- `perseus.drawing`: the software rasteriser.
  - `pm_matrices(view, transform)` returns the projection-model-view matrix and
    its inverse.
  - `apply_coordinate_transform` projects a drawing model's vertices to
    viewport pixels.
  - `draw_wireframe` draws outlines and returns the region of interest
    `[min x, min y, max x, max y, width, height]`.
  - `draw_filled` fills triangles into a `RenderTarget`. The target has a
    colour image, a nearest-depth z-buffer, a farthest-depth z-buffer and an
    object-id image. Depths are scaled by `MAX_INT`.
  - `draw_mask` fills plain silhouettes without depth.
  - `expand_roi` widens a region by a band and clamps it to the image.

## Example: rendering a mesh

```python
from perseus.drawing import (
    RenderTarget,
    apply_coordinate_transform,
    draw_filled,
    draw_wireframe,
    expand_roi,
    pm_matrices,
)
from perseus.image import Image
from perseus.model import Model
from perseus.object_transform import ObjectTransform
from perseus.render_objects import RenderView

width, height = 640, 480
view = RenderView.from_intrinsics(
    width, height, 640, 480, 525.0, 525.0, 320.0, 240.0, 0.1, 100.0, 0
)

model = Model.from_path("mesh.obj")
drawing_model = model.to_drawing_model()

pose = ObjectTransform()
pose.set_from_euler(1.0, 3.0, 30.0, 180.0, 80.0, 60.0)  # rotation in degrees

pm, inv_pm = pm_matrices(view, pose)
apply_coordinate_transform(view, drawing_model, pm)

target = RenderTarget(width, height)
draw_filled(target, drawing_model, object_id=0)

wireframe = Image(width, height)
roi = expand_roi(draw_wireframe(wireframe, drawing_model), 8, width, height)
```

## Example: refining poses

`perseus.optimiser` has these parts:

- `EnergyFunction` is an abstract base class. A subclass implements
  `prepare_iteration(targets, config)` and `first_derivatives(targets, config)`.
  The second method must store each target's gradient in its `dpose`.
- `Target` pairs an initial pose, the current pose, the gradient and a
  per-target `StepSize`. It can also hold an `on_pose_change` callback, which
  is called each time the optimiser changes the pose.
- `Optimiser(energy_function)` descends through the eight levels returned by
  `preset_step_sizes()`.

The optimiser reads two attributes from `config`:

- `iter_count`, which defaults to 1.
- `iter_target`, an `IterationTarget`, which defaults to `BOTH`.

```python
from types import SimpleNamespace

from perseus.optimiser import EnergyFunction, Optimiser, Target


class MyEnergy(EnergyFunction):
    def prepare_iteration(self, targets, config):
        pass

    def first_derivatives(self, targets, config):
        for target in targets:
            target.dpose.set_from_array([0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0])


target = Target()
target.initial_pose.set_from_euler(0.0, 0.0, 30.0, 0.0, 0.0, 0.0)

optimiser = Optimiser(MyEnergy())
optimiser.minimise([target], SimpleNamespace(iter_count=2))
print(target.pose.translation)
```

`minimise` starts every target from its initial pose. Each iteration applies
the eight preset step levels and then normalises the rotation quaternions.
`minimise_single(targets, config, level)` descends repeatedly at a single step
level and raises `ValueError` if the level is out of range. `descend`,
`advance_translation` and `advance_rotation` are available for single steps.

## What this package does not do

- It has no command-line program.
- It does not load, save or display images. `Image` is an in-memory buffer
  only.
- It does not include a ready-made tracking energy, colour histograms or
  distance transforms. You must supply the energy function.
- It has no GPU rendering. All rasterisation is done in Python on the CPU.

## Running the tests

```
pytest
```